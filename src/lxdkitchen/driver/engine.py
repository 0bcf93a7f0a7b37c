"""Instance engine tying configuration, state files and the driver together."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from lxdkitchen.driver.config import ConfigManager
from lxdkitchen.driver.lxd_cli import LxdCliDriver
from lxdkitchen.driver.state import StateStore
from lxdkitchen.models.instance import RunState
from lxdkitchen.providers import ProviderRegistry, ProviderStatus
from lxdkitchen.utils.logging import setup_logging


logger = logging.getLogger(__name__)


class InstanceEngine:
    """Runs driver actions for configured instances."""
    
    def __init__(
        self,
        config_manager: ConfigManager,
        provider_registry: ProviderRegistry,
        state_store: StateStore,
    ):
        """Initialize instance engine."""
        self.config_manager = config_manager
        self.provider_registry = provider_registry
        self.state_store = state_store
        self.driver = LxdCliDriver(provider_registry)
        
    async def create_instance(self, name: str) -> RunState:
        """Create a specific instance."""
        instance = self.config_manager.get_instance(name)
        descriptor = instance.descriptor()
        options = instance.options()
        state = await self.state_store.load(name)
        
        try:
            return await self.driver.create(descriptor, options, state)
        finally:
            # Partial progress, such as a discovered hostname, is kept for re-runs
            await self.state_store.save(name, state)
            
    async def destroy_instance(self, name: str) -> RunState:
        """Destroy a specific instance."""
        instance = self.config_manager.get_instance(name)
        descriptor = instance.descriptor()
        options = instance.options(resolve_key=False)
        state = await self.state_store.load(name)
        
        try:
            return await self.driver.destroy(descriptor, options, state)
        finally:
            await self.state_store.save(name, state)
            
    async def get_instance_status(self, name: str) -> Dict[str, Any]:
        """Get detailed status for a specific instance."""
        instance = self.config_manager.get_instance(name)
        descriptor = instance.descriptor()
        image_name = instance.driver.image_name or instance.platform
        
        container_state = await self.driver.containers.state(descriptor)
        image_status = await self.driver.images.status(image_name)
        state = await self.state_store.load(name)
        
        return {
            "name": name,
            "suite": instance.suite,
            "platform": instance.platform,
            "image": image_name,
            "image_present": image_status == ProviderStatus.PRESENT,
            "state": container_state.value,
            "hostname": state.hostname,
            "last_action": state.last_action,
        }
        
    async def get_all_instance_statuses(self) -> Dict[str, Dict[str, Any]]:
        """Get status for all instances."""
        statuses = {}
        for name in self.config_manager.list_instances():
            statuses[name] = await self.get_instance_status(name)
        return statuses


async def build_engine(config_file: Path, log_level: Optional[str] = None) -> InstanceEngine:
    """Load configuration and wire up an engine."""
    config_manager = ConfigManager(config_file)
    await config_manager.load()
    
    config = config_manager.config
    setup_logging(log_level or config.log_level)
    
    registry = ProviderRegistry()
    await registry.initialize(config)
    
    return InstanceEngine(
        config_manager=config_manager,
        provider_registry=registry,
        state_store=StateStore(config_manager.state_dir),
    )
