"""Provider registry for managing resource providers."""

import logging
from typing import Dict, Optional, Type

from lxdkitchen.providers.base import BaseProvider
from lxdkitchen.providers.container import ContainerProvider
from lxdkitchen.providers.image import ImageProvider
from lxdkitchen.providers.network import NetworkProvider
from lxdkitchen.providers.state import LxcStateProber, StateProber
from lxdkitchen.utils.lxc import LxcClient


logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Registry for managing providers.
    
    Providers share one ``LxcClient`` and one ``StateProber``. A prober
    passed in replaces the text-scraping default.
    """
    
    def __init__(self, prober: Optional[StateProber] = None):
        """Initialize provider registry."""
        self.client: Optional[LxcClient] = None
        self.prober: Optional[StateProber] = prober
        self._providers: Dict[str, BaseProvider] = {}
        self._provider_classes: Dict[str, Type[BaseProvider]] = {
            "image": ImageProvider,
            "container": ContainerProvider,
            "network": NetworkProvider,
        }
        
    async def initialize(self, config):
        """Initialize all providers with two-pass injection."""
        self.client = LxcClient(config.lxc)
        if self.prober is None:
            self.prober = LxcStateProber(self.client)
            
        # Phase 1: Instantiate all providers
        for name, provider_class in self._provider_classes.items():
            try:
                self._providers[name] = provider_class()
            except Exception as e:
                logger.error(f"Failed to instantiate provider {name}: {e}")
                raise
                
        # Phase 2: Initialize and inject registry
        for name, provider in self._providers.items():
            try:
                await provider.initialize(config, self)
                logger.debug(f"Initialized provider: {name}")
            except Exception as e:
                logger.error(f"Failed to initialize provider {name}: {e}")
                raise
                
    def get_provider(self, name: str) -> Optional[BaseProvider]:
        """Get a provider by name."""
        return self._providers.get(name)
        
    def list_providers(self) -> list[str]:
        """List available provider names."""
        return list(self._providers.keys())
