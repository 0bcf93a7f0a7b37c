"""Project file loading."""

import asyncio
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from pydantic import BaseModel, ValidationError

from lxdkitchen.exceptions import ConfigurationError
from lxdkitchen.models.config import DriverConfig, KitchenConfig
from lxdkitchen.models.instance import (
    InstanceDescriptor,
    ProvisioningOptions,
    resolve_public_key_path,
)
from lxdkitchen.utils.templates import merge_dicts


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".kitchen.yml"


def instance_name(suite: str, platform: str) -> str:
    """Name an instance after its suite and platform."""
    return re.sub(r"[_,/]", "-", f"{suite}-{platform}").replace(".", "")


class InstanceConfig(BaseModel):
    """One suite/platform combination with its merged driver settings."""
    name: str
    suite: str
    platform: str
    driver: DriverConfig
    
    def descriptor(self) -> InstanceDescriptor:
        """Build the instance descriptor."""
        return InstanceDescriptor(
            name=self.name,
            platform_name=self.platform,
            profile=self.driver.profile,
            config=self.driver.config,
            ipv4=self.driver.ipv4,
            ip_gateway=self.driver.ip_gateway,
            dns_servers=self.driver.dns_servers,
            domain_name=self.driver.domain_name,
        )
        
    def options(self, resolve_key: bool = True) -> ProvisioningOptions:
        """Resolve provisioning options.
        
        The public key is located only when ``resolve_key`` is set, so
        destroying does not depend on a key being present.
        """
        public_key_path = self.driver.public_key_path
        if resolve_key:
            public_key_path = resolve_public_key_path(public_key_path)
        return ProvisioningOptions(
            public_key_path=public_key_path,
            image_name=self.driver.image_name or self.platform,
            image_os=self.driver.image_os,
            image_release=self.driver.image_release,
            stop_instead_of_destroy=self.driver.stop_instead_of_destroy,
        )


class ConfigManager:
    """Loads the project file and expands it into instances."""
    
    def __init__(self, config_file: Path = Path(DEFAULT_CONFIG_FILE)):
        """Initialize configuration manager."""
        self.config_file = Path(config_file)
        self.yaml = YAML(typ="safe")
        self.config: Optional[KitchenConfig] = None
        self.instances: Dict[str, InstanceConfig] = {}
        
    async def load(self):
        """Load the project file."""
        logger.debug(f"Loading configuration from {self.config_file}")
        
        if not self.config_file.exists():
            raise ConfigurationError(f"Configuration not found: {self.config_file}")
            
        try:
            data = await self._read_yaml(self.config_file)
            if data is not None and not isinstance(data, dict):
                raise ConfigurationError(f"Expected a mapping in {self.config_file}")
            self.config = KitchenConfig(**(data or {}))
        except YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.config_file}: {e}") from e
        except ValidationError as e:
            logger.error(f"Invalid configuration: {e}")
            raise ConfigurationError(f"Invalid configuration in {self.config_file}: {e}") from e
            
        self.instances = self._expand_instances(self.config)
        logger.debug(f"Loaded {len(self.instances)} instances")
        
    def _expand_instances(self, config: KitchenConfig) -> Dict[str, InstanceConfig]:
        """Combine every suite with every platform."""
        instances: Dict[str, InstanceConfig] = {}
        
        for suite in config.suites:
            for platform in config.platforms:
                name = instance_name(suite.name, platform.name)
                # Suite settings win over platform settings, which win over defaults
                merged = merge_dicts(merge_dicts(config.driver, platform.driver), suite.driver)
                try:
                    driver = DriverConfig(**merged)
                except ValidationError as e:
                    raise ConfigurationError(f"Invalid driver settings for {name}: {e}") from e
                instances[name] = InstanceConfig(
                    name=name, suite=suite.name, platform=platform.name, driver=driver
                )
                
        return instances
        
    async def _read_yaml(self, file_path: Path) -> Dict[str, Any]:
        """Read and parse YAML file."""
        return await asyncio.to_thread(lambda: self.yaml.load(file_path.read_text()))
        
    @property
    def state_dir(self) -> Path:
        """Directory holding per-instance state, relative to the project file."""
        state_dir = Path(self.config.state_dir)
        if state_dir.is_absolute():
            return state_dir
        return self.config_file.parent / state_dir
        
    def list_instances(self) -> List[str]:
        """List instance names in configuration order."""
        return list(self.instances.keys())
        
    def get_instance(self, name: str) -> InstanceConfig:
        """Get instance configuration by name."""
        instance = self.instances.get(name)
        if instance is None:
            raise ConfigurationError(f"Instance {name} not found in configuration")
        return instance
