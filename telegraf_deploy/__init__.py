"""Telegraf Deploy - host-local deployment of the Telegraf agent.

Copies the agent binary and its configuration fragments onto a machine,
keeping the install tree in sync with a source directory.

Key responsibilities:
- Compare deployed files against the source by SHA-256 digest
- Create, update or skip each managed file
- Pick role-specific configs (AD, DNS, DFS) from host facts
- Test the assembled configuration with `telegraf --test`
- Install or restart the Telegraf service
"""

__version__ = "0.1.0"
