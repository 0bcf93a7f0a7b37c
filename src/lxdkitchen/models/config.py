"""Configuration models."""

import ipaddress
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class LxcConfig(BaseModel):
    """Hypervisor command-line settings."""
    binary: str = Field(default="lxc")
    image_import_command: List[str] = Field(default_factory=lambda: ["lxd-images", "import"])
    bridge: str = Field(default="lxcbr0")
    interface: str = Field(default="eth0")
    import_timeout: float = Field(default=1800, gt=0)
    
    model_config = ConfigDict(extra="ignore")


class WaitConfig(BaseModel):
    """Convergence loop settings.
    
    ``timeout`` and ``max_attempts`` default to ``None``, which waits
    forever.
    """
    interval: float = Field(default=0.3, ge=0)
    timeout: Optional[float] = Field(default=None, gt=0)
    max_attempts: Optional[int] = Field(default=None, ge=1)
    
    model_config = ConfigDict(extra="ignore")


class DriverConfig(BaseModel):
    """Driver settings as written in the project file."""
    public_key_path: Optional[str] = None
    profile: Optional[str] = None
    config: Optional[str] = None
    image_name: Optional[str] = None
    image_os: Optional[str] = None
    image_release: Optional[str] = None
    ipv4: Optional[str] = None
    ip_gateway: str = Field(default="auto")
    dns_servers: List[str] = Field(default_factory=list)
    domain_name: Optional[str] = None
    stop_instead_of_destroy: bool = Field(default=False)
    
    model_config = ConfigDict(extra="ignore")
    
    @field_validator("ipv4")
    @classmethod
    def validate_ipv4(cls, v):
        """Validate static address, with or without prefix length."""
        if v is not None:
            ipaddress.IPv4Interface(v)
        return v
        
    @field_validator("dns_servers")
    @classmethod
    def validate_dns_servers(cls, v):
        """Validate nameserver addresses."""
        for server in v:
            ipaddress.ip_address(server)
        return v


class PlatformConfig(BaseModel):
    """A platform entry."""
    name: str = Field(..., description="Platform name, e.g. ubuntu-16.04")
    driver: Dict[str, Any] = Field(default_factory=dict)
    
    model_config = ConfigDict(extra="ignore")


class SuiteConfig(BaseModel):
    """A suite entry."""
    name: str = Field(..., description="Suite name")
    driver: Dict[str, Any] = Field(default_factory=dict)
    
    model_config = ConfigDict(extra="ignore")


class KitchenConfig(BaseModel):
    """Main project file model."""
    driver: Dict[str, Any] = Field(default_factory=dict)
    lxc: LxcConfig = Field(default_factory=LxcConfig)
    wait: WaitConfig = Field(default_factory=WaitConfig)
    log_level: str = Field(default="INFO")
    state_dir: str = Field(default=".kitchen")
    platforms: List[PlatformConfig] = Field(default_factory=list)
    suites: List[SuiteConfig] = Field(default_factory=lambda: [SuiteConfig(name="default")])
    
    model_config = ConfigDict(extra="ignore")
    
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()
