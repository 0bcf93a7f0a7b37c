"""Command builder for the lxc command-line client."""

import logging
import shlex
from typing import List, Optional

from lxdkitchen.models.config import LxcConfig
from lxdkitchen.utils.commands import CommandResult, run_command


logger = logging.getLogger(__name__)


class LxcClient:
    """Issues hypervisor commands through the ``lxc`` binary.
    
    Every method maps to exactly one process invocation. Methods used as
    probes default to ``check=False`` and leave the exit status to the
    caller; state-changing methods raise ``CommandError`` on failure.
    """
    
    def __init__(self, config: Optional[LxcConfig] = None):
        """Initialize client."""
        self.config = config or LxcConfig()
        
    def _cmd(self, *args: str) -> List[str]:
        return [self.config.binary, *args]
        
    async def info(self, name: str, check: bool = False) -> CommandResult:
        """Show container information."""
        return await run_command(self._cmd("info", name), check=check)
        
    async def image_show(self, alias: str, check: bool = False) -> CommandResult:
        """Show image information."""
        return await run_command(self._cmd("image", "show", alias), check=check)
        
    async def init(
        self,
        image: str,
        name: str,
        profile: Optional[str] = None,
        config: Optional[str] = None,
    ) -> CommandResult:
        """Create a container from an image without starting it."""
        cmd = self._cmd("init", image, name)
        if profile:
            cmd += ["-p", profile]
        if config:
            cmd += ["-c", config]
        return await run_command(cmd)
        
    async def start(self, name: str) -> CommandResult:
        """Start a container."""
        return await run_command(self._cmd("start", name))
        
    async def stop(self, name: str) -> CommandResult:
        """Stop a container."""
        return await run_command(self._cmd("stop", name))
        
    async def delete(self, name: str) -> CommandResult:
        """Delete a container."""
        return await run_command(self._cmd("delete", name))
        
    async def exec(
        self,
        name: str,
        command: List[str],
        check: bool = True,
        input: Optional[str] = None,
    ) -> CommandResult:
        """Execute a command inside a container."""
        return await run_command(
            self._cmd("exec", name, "--", *command), check=check, input=input
        )
        
    async def file_push(
        self, local_path: str, name: str, remote_path: str, check: bool = True
    ) -> CommandResult:
        """Copy a local file into a container."""
        target = f"{name}/{remote_path.lstrip('/')}"
        return await run_command(
            self._cmd("file", "push", local_path, target), check=check
        )
        
    async def config_set_raw(self, name: str, subsystem: str, value: str) -> CommandResult:
        """Set a raw.<subsystem> key, passing the value on standard input."""
        return await run_command(
            self._cmd("config", "set", name, f"raw.{subsystem}", "-"), input=value
        )
        
    def import_image_command(self, os: str, release: str, alias: str) -> List[str]:
        """Build the image import command line."""
        return [*self.config.image_import_command, os, release, "--alias", alias]
        
    async def import_image(self, os: str, release: str, alias: str) -> CommandResult:
        """Import an image under the given alias."""
        cmd = self.import_image_command(os, release, alias)
        logger.debug(f"Importing image: {shlex.join(cmd)}")
        return await run_command(cmd, timeout=self.config.import_timeout)
