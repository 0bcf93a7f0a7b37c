"""Container provider driving the lxc client."""

import logging
from typing import Optional, TYPE_CHECKING

from lxdkitchen.exceptions import CommandError
from lxdkitchen.models.config import WaitConfig
from lxdkitchen.models.instance import InstanceDescriptor
from lxdkitchen.providers.base import BaseProvider, ProviderStatus
from lxdkitchen.providers.state import ContainerState, StateProber
from lxdkitchen.utils.lxc import LxcClient
from lxdkitchen.utils.wait import wait_with

if TYPE_CHECKING:
    from lxdkitchen.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)

SSH_DIR = "/root/.ssh"
AUTHORIZED_KEYS = "/root/.ssh/authorized_keys"


class ContainerProvider(BaseProvider):
    """Provider for container lifecycle steps."""
    
    def __init__(self):
        """Initialize container provider."""
        self.client: Optional[LxcClient] = None
        self.prober: Optional[StateProber] = None
        self.wait_config = WaitConfig()
        self.interface = "eth0"
        
    async def initialize(self, config, registry: "ProviderRegistry") -> None:
        """Initialize provider with configuration and registry."""
        self.client = registry.client
        self.prober = registry.prober
        self.wait_config = config.wait
        self.interface = config.lxc.interface
        
    async def status(self, spec: InstanceDescriptor) -> ProviderStatus:
        """Check if container exists."""
        if await self.prober.exists(spec.name):
            return ProviderStatus.PRESENT
        return ProviderStatus.ABSENT
        
    async def state(self, spec: InstanceDescriptor) -> ContainerState:
        """Observe whether the container is absent, stopped or running."""
        return await self.prober.state(spec.name)
        
    async def init(self, spec: InstanceDescriptor, image_name: str) -> None:
        """Create the container from an image."""
        logger.info(f"Initializing container {spec.name}")
        try:
            await self.client.init(image_name, spec.name, spec.profile, spec.config)
        except CommandError as e:
            logger.error(f"Failed to initialize container {spec.name}: {e}")
            raise
            
    async def absent(self, spec: InstanceDescriptor, keep: bool = False) -> None:
        """Ensure container is stopped, and deleted unless ``keep`` is set."""
        if await self.status(spec) == ProviderStatus.ABSENT:
            logger.debug(f"Container {spec.name} already absent")
            return
            
        if await self.prober.is_running(spec.name):
            logger.info(f"Stopping container {spec.name}")
            try:
                await self.client.stop(spec.name)
            except CommandError as e:
                logger.error(f"Failed to stop container {spec.name}: {e}")
                raise
                
        if keep:
            logger.info(f"Keeping stopped container {spec.name}")
            return
            
        logger.info(f"Deleting container {spec.name}")
        try:
            await self.client.delete(spec.name)
        except CommandError as e:
            logger.error(f"Failed to delete container {spec.name}: {e}")
            raise
            
    async def wait_for_path(self, spec: InstanceDescriptor, path: str) -> None:
        """Wait until a path exists inside the container."""
        logger.debug(f"Waiting for {path} to become available...")
        
        async def check():
            return await self.prober.path_exists(spec.name, path)
            
        await wait_with(self.wait_config, check, f"{path} in {spec.name}")
        logger.debug(f"Found {path}")
        
    async def wait_for_address(self, spec: InstanceDescriptor) -> str:
        """Wait for the container interface to get an IPv4 address."""
        logger.info("Waiting for network to become ready")
        
        async def check():
            return await self.prober.ipv4_address(spec.name, self.interface)
            
        address = await wait_with(
            self.wait_config, check, f"an IPv4 address on {spec.name}"
        )
        logger.debug(f"Found IP address {address}")
        return address
        
    async def install_public_key(self, spec: InstanceDescriptor, public_key_path: str) -> None:
        """Install the public key as root's authorized_keys."""
        logger.info(f"Setting up public key {public_key_path} on {spec.name}")
        await self.wait_for_path(spec, SSH_DIR)
        
        # The push itself is retried, the directory may exist before it is writable
        async def push():
            logger.debug("Uploading public key...")
            result = await self.client.file_push(
                public_key_path, spec.name, AUTHORIZED_KEYS, check=False
            )
            return result.ok
            
        await wait_with(self.wait_config, push, f"public key upload to {spec.name}")
        logger.debug(f"Finished copying public key from {public_key_path} to {spec.name}")
