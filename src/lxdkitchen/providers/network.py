"""Network provider configuring addressing, resolvers and hosts inside containers."""

import logging
import shlex
from typing import List, Optional, TYPE_CHECKING

from lxdkitchen.exceptions import CommandError
from lxdkitchen.models.config import LxcConfig
from lxdkitchen.models.instance import InstanceDescriptor
from lxdkitchen.providers.base import BaseProvider
from lxdkitchen.utils.lxc import LxcClient
from lxdkitchen.utils.templates import render_template

if TYPE_CHECKING:
    from lxdkitchen.providers.container import ContainerProvider
    from lxdkitchen.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)

RESOLV_BASE = "/etc/resolvconf/resolv.conf.d/base"
HOSTS_FILE = "/etc/hosts"
HOSTS_ADDRESS = "127.0.1.1"
HOSTS_MARKER = "#***** Setup by lxd-kitchen *****#"
FALLBACK_NAMESERVERS = ["8.8.8.8", "8.8.4.4"]

RAW_LXC_TEMPLATE = """\
lxc.network.type = veth
lxc.network.name = {{ interface }}
lxc.network.link = {{ bridge }}
lxc.network.ipv4 = {{ ipv4 }}
lxc.network.ipv4.gateway = {{ gateway }}
lxc.network.flags = up
"""

RESOLV_TEMPLATE = """\
{% for server in nameservers %}nameserver {{ server }}
{% endfor %}"""


def resolve_nameservers(spec: InstanceDescriptor) -> List[str]:
    """Pick the nameservers to configure, possibly none."""
    if spec.dns_servers:
        return list(spec.dns_servers)
    if not spec.ipv4:
        return []
    if spec.ip_gateway in ("auto", ""):
        return list(FALLBACK_NAMESERVERS)
    return [spec.ip_gateway, *FALLBACK_NAMESERVERS]


def update_hosts(content: str, entry: str) -> str:
    """Map ``entry`` to 127.0.1.1 in a hosts file.
    
    Existing 127.0.1.1 lines are rewritten in place; without one a marked
    entry is appended.
    """
    line = f"{HOSTS_ADDRESS}\t{entry}"
    lines = content.splitlines()
    found = False
    
    for i, existing in enumerate(lines):
        if existing.startswith(HOSTS_ADDRESS):
            lines[i] = line
            found = True
            
    if not found:
        lines += [HOSTS_MARKER, line]
        
    return "\n".join(lines) + "\n"


class NetworkProvider(BaseProvider):
    """Provider for in-container network settings."""
    
    def __init__(self):
        """Initialize network provider."""
        self.client: Optional[LxcClient] = None
        self.lxc_config = LxcConfig()
        self._container_provider: Optional["ContainerProvider"] = None
        
    async def initialize(self, config, registry: "ProviderRegistry") -> None:
        """Initialize provider with configuration and registry."""
        self.client = registry.client
        self.lxc_config = config.lxc
        
        # Inject dependency explicitly
        self._container_provider = registry.get_provider("container")
        
    @property
    def container_provider(self) -> Optional["ContainerProvider"]:
        """Get container provider."""
        return self._container_provider
        
    async def configure_start(self, spec: InstanceDescriptor) -> None:
        """Apply static addressing, if requested, and start the container."""
        interface = self.lxc_config.interface
        
        if spec.ipv4:
            raw_config = render_template(
                RAW_LXC_TEMPLATE,
                interface=interface,
                bridge=self.lxc_config.bridge,
                ipv4=spec.ipv4,
                gateway=spec.ip_gateway,
            )
            logger.debug(f"Setting static address {spec.ipv4} on {spec.name}")
            try:
                await self.client.config_set_raw(spec.name, "lxc", raw_config)
            except CommandError as e:
                logger.error(f"Failed to set static address on {spec.name}: {e}")
                raise
            
        logger.info(f"Starting container {spec.name}")
        try:
            await self.client.start(spec.name)
        except CommandError as e:
            logger.error(f"Failed to start container {spec.name}: {e}")
            raise
            
    async def disable_dhcp(self, spec: InstanceDescriptor) -> None:
        """Keep DHCP from overriding a static address.
        
        Runs on every create so an interrupted run is completed by the
        next one. The edit is idempotent.
        """
        if not spec.ipv4:
            return
            
        interface_file = f"/etc/network/interfaces.d/{self.lxc_config.interface}.cfg"
        await self.container_provider.wait_for_path(spec, interface_file)
        logger.debug(f"Switching {interface_file} on {spec.name} to manual")
        await self.client.exec(spec.name, ["sed", "-i", "s/dhcp/manual/g", interface_file])
            
    async def configure_dns(self, spec: InstanceDescriptor) -> None:
        """Configure resolvers and the container's own host name."""
        nameservers = resolve_nameservers(spec)
        if nameservers:
            await self.container_provider.wait_for_path(spec, RESOLV_BASE)
            logger.debug(
                f"Setting up the following dns servers via {RESOLV_BASE}: "
                f"{' '.join(nameservers)}"
            )
            content = render_template(RESOLV_TEMPLATE, nameservers=nameservers)
            await self._write_file(spec, RESOLV_BASE, content)
            await self.client.exec(spec.name, ["resolvconf", "-u"])
            
        logger.debug(f"Setting up {HOSTS_FILE}")
        await self.container_provider.wait_for_path(spec, HOSTS_FILE)
        result = await self.client.exec(spec.name, ["cat", HOSTS_FILE])
        await self._write_file(spec, HOSTS_FILE, update_hosts(result.stdout, spec.host_entry))
        
    async def _write_file(self, spec: InstanceDescriptor, path: str, content: str) -> None:
        """Replace a file inside the container with ``content``."""
        await self.client.exec(
            spec.name, ["sh", "-c", f"cat > {shlex.quote(path)}"], input=content
        )
