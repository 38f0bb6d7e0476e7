"""Host role detection.

Decides which optional role configs apply to this machine:

- Domain controller -> activedirectory.conf
- "DNS Server" service present -> dns.conf
- "DFS Replication" service present -> dfsr.conf
- "DFS Namespace" service present -> dfsn.conf

Workstations never get role configs.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, FrozenSet

import psutil

from .config import is_windows
from .errors import RoleDetectionFailure

logger = logging.getLogger("telegraf-deploy")

PRODUCT_OPTIONS_KEY = r"SYSTEM\CurrentControlSet\Control\ProductOptions"

# ProductType registry values
PRODUCT_WORKSTATION = "WinNT"
PRODUCT_SERVER = "ServerNT"
PRODUCT_DOMAIN_CONTROLLER = "LanmanNT"


@dataclass(frozen=True)
class HostFacts:
    """Snapshot of the host, taken once per run."""
    is_server: bool
    is_domain_controller: bool = False
    services: FrozenSet[str] = field(default_factory=frozenset)

    def has_service(self, display_name: str) -> bool:
        return display_name in self.services


RolePredicate = Callable[[HostFacts], bool]


def _service_present(display_name: str) -> RolePredicate:
    return lambda facts: facts.has_service(display_name)


ROLE_POLICY: tuple[tuple[RolePredicate, str], ...] = (
    (lambda facts: facts.is_domain_controller, "activedirectory.conf"),
    (_service_present("DNS Server"), "dns.conf"),
    (_service_present("DFS Replication"), "dfsr.conf"),
    (_service_present("DFS Namespace"), "dfsn.conf"),
)

ROLE_CONFIGS = tuple(name for _, name in ROLE_POLICY)


def select_role_configs(facts: HostFacts) -> list[str]:
    """Names of the role configs that apply to `facts`."""
    if not facts.is_server:
        return []
    return [name for predicate, name in ROLE_POLICY if predicate(facts)]


def detect_host_facts() -> HostFacts:
    """Query the local OS for server role and installed services.

    Returns:
        HostFacts for this machine

    Raises:
        RoleDetectionFailure: if the OS cannot be queried
    """
    if not is_windows():
        # Windows server roles do not exist on this platform
        logger.debug("Non-Windows host, no server roles to detect")
        return HostFacts(is_server=False)

    product_type = _read_product_type()
    if product_type not in (PRODUCT_WORKSTATION, PRODUCT_SERVER, PRODUCT_DOMAIN_CONTROLLER):
        raise RoleDetectionFailure(f"Unrecognized ProductType: {product_type!r}")

    is_server = product_type != PRODUCT_WORKSTATION
    facts = HostFacts(
        is_server=is_server,
        is_domain_controller=product_type == PRODUCT_DOMAIN_CONTROLLER,
        # Role configs never apply to workstations
        services=_list_service_names() if is_server else frozenset(),
    )
    logger.info(
        f"Host facts: server={facts.is_server} domain_controller={facts.is_domain_controller} "
        f"services={len(facts.services)}"
    )
    return facts


def _read_product_type() -> str:
    import winreg

    try:
        with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, PRODUCT_OPTIONS_KEY) as key:
            value, _ = winreg.QueryValueEx(key, "ProductType")
    except OSError as e:
        raise RoleDetectionFailure(f"Cannot read ProductType: {e}") from e
    return str(value)


def _list_service_names() -> FrozenSet[str]:
    try:
        return frozenset(service.display_name() for service in psutil.win_service_iter())
    except (OSError, psutil.Error) as e:
        raise RoleDetectionFailure(f"Cannot enumerate services: {e}") from e
