"""State probes for containers and images."""

import ipaddress
import logging
import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from lxdkitchen.exceptions import ParseError
from lxdkitchen.utils.lxc import LxcClient


logger = logging.getLogger(__name__)

STATUS_PATTERN = re.compile(r"^Status:\s*([A-Za-z]+)\s*$", re.MULTILINE)


class ContainerState(Enum):
    """Observed container state."""
    ABSENT = "absent"
    STOPPED = "stopped"
    RUNNING = "running"


def parse_status(info: str) -> str:
    """Extract the Status field from ``lxc info`` output."""
    match = STATUS_PATTERN.search(info)
    if not match:
        raise ParseError("No 'Status:' field in container info output")
    return match.group(1)


def parse_ipv4(info: str, interface: str = "eth0") -> Optional[str]:
    """Extract the IPv4 address of ``interface`` from ``lxc info`` output."""
    pattern = re.compile(
        rf"^\s+{re.escape(interface)}:\s+IPV4\s+(\d+\.\d+\.\d+\.\d+)",
        re.MULTILINE,
    )
    match = pattern.search(info)
    if not match:
        return None
    try:
        address = ipaddress.IPv4Address(match.group(1))
    except ValueError:
        return None
    if address.is_unspecified:
        return None
    return str(address)


class StateProber(ABC):
    """Read-only queries against the hypervisor."""
    
    @abstractmethod
    async def exists(self, name: str) -> bool:
        """Check whether a container exists."""
        pass
        
    @abstractmethod
    async def is_running(self, name: str) -> bool:
        """Check whether an existing container is running."""
        pass
        
    @abstractmethod
    async def image_exists(self, alias: str) -> bool:
        """Check whether an image alias exists."""
        pass
        
    @abstractmethod
    async def ipv4_address(self, name: str, interface: str = "eth0") -> Optional[str]:
        """Return the IPv4 address of an interface, if assigned."""
        pass
        
    @abstractmethod
    async def path_exists(self, name: str, path: str) -> bool:
        """Check whether a path exists inside a container."""
        pass
        
    async def state(self, name: str) -> ContainerState:
        """Observe the current container state."""
        if not await self.exists(name):
            return ContainerState.ABSENT
        if await self.is_running(name):
            return ContainerState.RUNNING
        return ContainerState.STOPPED


class LxcStateProber(StateProber):
    """Prober scraping the text output of the lxc client."""
    
    def __init__(self, client: LxcClient):
        self.client = client
        
    async def exists(self, name: str) -> bool:
        result = await self.client.info(name)
        if result.ok:
            logger.debug(f"Container {name} exists")
            return True
        logger.debug(f"Container {name} doesn't exist")
        return False
        
    async def is_running(self, name: str) -> bool:
        result = await self.client.info(name)
        status = parse_status(result.stdout)
        running = status.lower() == "running"
        logger.debug(f"Container {name} is {status.lower()}")
        return running
        
    async def image_exists(self, alias: str) -> bool:
        result = await self.client.image_show(alias)
        return result.ok
        
    async def ipv4_address(self, name: str, interface: str = "eth0") -> Optional[str]:
        result = await self.client.info(name)
        if not result.ok:
            return None
        return parse_ipv4(result.stdout, interface)
        
    async def path_exists(self, name: str, path: str) -> bool:
        result = await self.client.exec(name, ["ls", path], check=False)
        return result.ok
