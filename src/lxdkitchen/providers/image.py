"""Image provider resolving platforms to image aliases."""

import asyncio
import logging
import shlex
from typing import Dict, Optional, Tuple, TYPE_CHECKING

from lxdkitchen.exceptions import CommandError, ConfigurationError
from lxdkitchen.models.image import ImageSpec
from lxdkitchen.models.instance import InstanceDescriptor, ProvisioningOptions
from lxdkitchen.providers.base import BaseProvider, ProviderStatus
from lxdkitchen.providers.state import StateProber
from lxdkitchen.utils.lxc import LxcClient

if TYPE_CHECKING:
    from lxdkitchen.providers.registry import ProviderRegistry


logger = logging.getLogger(__name__)

DEFAULT_UBUNTU_RELEASE = "trusty"

UBUNTU_RELEASES = {
    "": "trusty",
    "14.04": "trusty",
    "1404": "trusty",
    "trusty": "trusty",
    "14.10": "utopic",
    "1410": "utopic",
    "utopic": "utopic",
    "15.04": "vivid",
    "1504": "vivid",
    "vivid": "vivid",
    "15.10": "wily",
    "1510": "wily",
    "wily": "wily",
    "16.04": "xenial",
    "1604": "xenial",
    "xenial": "xenial",
}


def resolve_image_source(platform_name: str) -> Tuple[str, str]:
    """Derive the (os, release) pair to import for a platform name.
    
    The name is split on its first hyphen. Ubuntu release tokens are
    mapped to code names; anything else is passed through unchanged.
    """
    platform, _, release = platform_name.partition("-")
    if platform.lower() == "ubuntu":
        return platform, UBUNTU_RELEASES.get(release.lower(), release)
    return platform, release


class ImageProvider(BaseProvider):
    """Provider for image aliases.
    
    Aliases are shared by every container on the host. They are created
    once and never replaced or removed here. Imports of the same alias
    are serialized within this process only.
    """
    
    def __init__(self):
        """Initialize image provider."""
        self.client: Optional[LxcClient] = None
        self.prober: Optional[StateProber] = None
        self._locks: Dict[str, asyncio.Lock] = {}
        
    async def initialize(self, config, registry: "ProviderRegistry") -> None:
        """Initialize provider with configuration and registry."""
        self.client = registry.client
        self.prober = registry.prober
        
    def resolve(self, descriptor: InstanceDescriptor, options: ProvisioningOptions) -> ImageSpec:
        """Build the image spec for an instance."""
        image_os, image_release = resolve_image_source(descriptor.platform_name)
        spec = ImageSpec(
            name=options.image_name,
            os=options.image_os or image_os,
            release=options.image_release or image_release,
        )
        if not spec.release:
            raise ConfigurationError(
                f"Cannot derive a release from platform {descriptor.platform_name}, "
                "set image_release"
            )
        return spec
        
    async def status(self, alias: str) -> ProviderStatus:
        """Check if image alias exists."""
        if await self.prober.image_exists(alias):
            return ProviderStatus.PRESENT
        return ProviderStatus.ABSENT

    async def ensure(self, descriptor: InstanceDescriptor, options: ProvisioningOptions) -> str:
        """Make sure the instance's image alias exists and return it."""
        image_name = options.image_name
        async with self._lock_for(image_name):
            if await self.status(image_name) == ProviderStatus.PRESENT:
                logger.debug(f"Image {image_name} exists")
                return image_name

            logger.info(f"Image {image_name} doesn't exist, creating now.")
            await self._import(self.resolve(descriptor, options))

        return image_name

    def _lock_for(self, alias: str) -> asyncio.Lock:
        if alias not in self._locks:
            self._locks[alias] = asyncio.Lock()
        return self._locks[alias]
        
    async def _import(self, spec: ImageSpec) -> None:
        cmd = self.client.import_image_command(spec.os, spec.release, spec.name)
        logger.info(
            "This may take a little while. If the import fails, or you want "
            "to see progress, stop here and run the following command manually:"
        )
        logger.info(shlex.join(cmd))
        
        try:
            await self.client.import_image(spec.os, spec.release, spec.name)
            logger.info(f"Image {spec.name} imported successfully")
        except CommandError as e:
            logger.error(f"Failed to import image {spec.name}: {e}")
            raise
