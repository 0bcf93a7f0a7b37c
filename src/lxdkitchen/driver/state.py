"""Per-instance run state files."""

import asyncio
import logging
from io import StringIO
from pathlib import Path

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from lxdkitchen.exceptions import ConfigurationError
from lxdkitchen.models.instance import RunState


logger = logging.getLogger(__name__)


class StateStore:
    """Keeps one YAML state file per instance."""
    
    def __init__(self, state_dir: Path):
        """Initialize state store."""
        self.state_dir = Path(state_dir)
        self.yaml = YAML(typ="safe")
        self.yaml.default_flow_style = False
        
    def path_for(self, name: str) -> Path:
        """State file of an instance."""
        return self.state_dir / f"{name}.yml"
        
    async def load(self, name: str) -> RunState:
        """Load instance state, empty if never saved."""
        path = self.path_for(name)
        if not await asyncio.to_thread(path.exists):
            return RunState()
            
        try:
            data = await asyncio.to_thread(lambda: self.yaml.load(path.read_text()))
            if data is not None and not isinstance(data, dict):
                raise ConfigurationError(f"Expected a mapping in {path}")
            return RunState(**(data or {}))
        except YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in state file {path}: {e}") from e
        except ValidationError as e:
            logger.error(f"Invalid state for {name}: {e}")
            raise ConfigurationError(f"Invalid state file {path}: {e}") from e
        
    async def save(self, name: str, state: RunState) -> None:
        """Write instance state."""
        path = self.path_for(name)
        buffer = StringIO()
        self.yaml.dump(state.model_dump(exclude_none=True), buffer)
        
        await asyncio.to_thread(lambda: self.state_dir.mkdir(parents=True, exist_ok=True))
        await asyncio.to_thread(path.write_text, buffer.getvalue())
        logger.debug(f"Saved state for {name} to {path}")
