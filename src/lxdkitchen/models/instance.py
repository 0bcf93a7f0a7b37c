"""Instance, option and run state models."""

import os
from pathlib import Path
from typing import List, Literal, Optional, Sequence
from pydantic import BaseModel, ConfigDict, Field

from lxdkitchen.exceptions import ConfigurationError


DEFAULT_PUBLIC_KEY_PATHS = (
    "~/.ssh/id_rsa.pub",
    "~/.ssh/id_dsa.pub",
    "~/.ssh/identity.pub",
    "~/.ssh/id_ecdsa.pub",
)


class InstanceDescriptor(BaseModel):
    """Identity and network settings of one container."""
    name: str = Field(..., description="Container name")
    platform_name: str = Field(..., description="Platform name, e.g. ubuntu-16.04")
    profile: Optional[str] = None
    config: Optional[str] = Field(None, description="Config override passed to init")
    ipv4: Optional[str] = None
    ip_gateway: str = Field(default="auto")
    dns_servers: List[str] = Field(default_factory=list)
    domain_name: Optional[str] = None
    
    model_config = ConfigDict(frozen=True)
    
    @property
    def host_entry(self) -> str:
        """Names mapped to 127.0.1.1 inside the container."""
        if self.domain_name:
            return f"{self.name}.{self.domain_name} {self.name}"
        return self.name


class ProvisioningOptions(BaseModel):
    """Resolved provisioning options."""
    public_key_path: Optional[str] = Field(None, description="Public key installed for root")
    image_name: str = Field(..., description="Image alias")
    image_os: Optional[str] = None
    image_release: Optional[str] = None
    stop_instead_of_destroy: bool = Field(default=False)
    
    model_config = ConfigDict(frozen=True)


class RunState(BaseModel):
    """State written back after each action."""
    hostname: Optional[str] = None
    last_action: Optional[Literal["create", "destroy"]] = None
    
    model_config = ConfigDict(extra="ignore")


def resolve_public_key_path(
    explicit: Optional[str] = None,
    candidates: Sequence[str] = DEFAULT_PUBLIC_KEY_PATHS,
) -> str:
    """Return the public key to install, failing if none can be found."""
    if explicit:
        path = Path(os.path.expanduser(explicit))
        if not path.is_file():
            raise ConfigurationError(f"Public key not found: {path}")
        return str(path)
        
    for candidate in candidates:
        path = Path(os.path.expanduser(candidate))
        if path.is_file():
            return str(path)
            
    raise ConfigurationError(
        "No public key found, set public_key_path "
        f"(looked for {', '.join(candidates)})"
    )
