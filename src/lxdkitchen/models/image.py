"""Image specification models."""

from pydantic import BaseModel, ConfigDict, Field


class ImageSpec(BaseModel):
    """A resolved image alias and the source it is imported from."""
    name: str = Field(..., description="Image alias")
    os: str = Field(..., description="Distribution passed to the import command")
    release: str = Field(..., description="Release passed to the import command")
    
    model_config = ConfigDict(frozen=True)
