"""Provisioning state machine for containers driven through lxc."""

import logging
from pathlib import Path
from typing import Optional

from lxdkitchen.exceptions import ConfigurationError
from lxdkitchen.models.instance import InstanceDescriptor, ProvisioningOptions, RunState
from lxdkitchen.providers.container import ContainerProvider
from lxdkitchen.providers.image import ImageProvider
from lxdkitchen.providers.network import NetworkProvider
from lxdkitchen.providers.registry import ProviderRegistry
from lxdkitchen.providers.state import ContainerState


logger = logging.getLogger(__name__)


class LxdCliDriver:
    """Creates and destroys one container per instance.
    
    Both operations re-observe the hypervisor on every call and can be
    re-run after any failure; nothing is rolled back. A container moves
    through absent, initialized, running, network configured and
    reachable on ``create``.
    """
    
    def __init__(self, provider_registry: ProviderRegistry):
        """Initialize driver."""
        self.provider_registry = provider_registry
        
    @property
    def images(self) -> ImageProvider:
        return self.provider_registry.get_provider("image")
        
    @property
    def containers(self) -> ContainerProvider:
        return self.provider_registry.get_provider("container")
        
    @property
    def network(self) -> NetworkProvider:
        return self.provider_registry.get_provider("network")
        
    async def create(
        self,
        descriptor: InstanceDescriptor,
        options: ProvisioningOptions,
        state: Optional[RunState] = None,
    ) -> RunState:
        """Bring the container to running, configured and reachable."""
        state = state if state is not None else RunState()
        
        if not options.public_key_path or not Path(options.public_key_path).is_file():
            raise ConfigurationError(f"Public key not found: {options.public_key_path}")
            
        current = await self.containers.state(descriptor)
        logger.debug(f"Container {descriptor.name} is {current.value}")
        
        if current == ContainerState.ABSENT:
            image_name = await self.images.ensure(descriptor, options)
            await self.containers.init(descriptor, image_name)
            current = ContainerState.STOPPED
            
        if current != ContainerState.RUNNING:
            await self.network.configure_start(descriptor)
            
        await self.network.disable_dhcp(descriptor)
        await self.network.configure_dns(descriptor)
        
        state.hostname = await self.containers.wait_for_address(descriptor)
        state.last_action = "create"
        
        await self.containers.install_public_key(descriptor, options.public_key_path)
        logger.info(f"Container {descriptor.name} is reachable at {state.hostname}")
        return state
        
    async def destroy(
        self,
        descriptor: InstanceDescriptor,
        options: ProvisioningOptions,
        state: Optional[RunState] = None,
    ) -> RunState:
        """Stop the container and delete it unless it should be kept."""
        state = state if state is not None else RunState()
        
        await self.containers.absent(descriptor, keep=options.stop_instead_of_destroy)
        state.hostname = None
        state.last_action = "destroy"
        return state
