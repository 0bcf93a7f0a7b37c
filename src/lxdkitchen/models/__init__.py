"""Pydantic models for configuration and validation."""

from lxdkitchen.models.config import (
    DriverConfig,
    KitchenConfig,
    LxcConfig,
    PlatformConfig,
    SuiteConfig,
    WaitConfig,
)
from lxdkitchen.models.image import ImageSpec
from lxdkitchen.models.instance import (
    InstanceDescriptor,
    ProvisioningOptions,
    RunState,
    resolve_public_key_path,
)

__all__ = [
    "DriverConfig",
    "KitchenConfig",
    "LxcConfig",
    "PlatformConfig",
    "SuiteConfig",
    "WaitConfig",
    "ImageSpec",
    "InstanceDescriptor",
    "ProvisioningOptions",
    "RunState",
    "resolve_public_key_path",
]
