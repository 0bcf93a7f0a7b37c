"""Resource providers for lxd-kitchen."""

from lxdkitchen.providers.base import BaseProvider, ProviderStatus
from lxdkitchen.providers.registry import ProviderRegistry
from lxdkitchen.providers.state import ContainerState, LxcStateProber, StateProber

__all__ = [
    "BaseProvider",
    "ProviderStatus",
    "ProviderRegistry",
    "ContainerState",
    "LxcStateProber",
    "StateProber",
]
