"""Local command execution."""

import asyncio
import logging
import shlex
from dataclasses import dataclass
from typing import List, Optional

from lxdkitchen.exceptions import CommandError


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result from running a command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""
    
    @property
    def ok(self) -> bool:
        """Whether the command exited successfully."""
        return self.returncode == 0


async def run_command(
    cmd: List[str],
    check: bool = True,
    capture_output: bool = True,
    timeout: Optional[float] = None,
    input: Optional[str] = None,
    **kwargs
) -> CommandResult:
    """Run a command asynchronously.
    
    With ``check`` disabled the exit status is only reported, never
    interpreted. ``input`` is written to the process' standard input.
    """
    logger.debug(f"Running command: {shlex.join(cmd)}")
    
    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdin=asyncio.subprocess.PIPE if input is not None else asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE if capture_output else None,
        stderr=asyncio.subprocess.PIPE if capture_output else None,
        **kwargs
    )
    
    try:
        stdout, stderr = await asyncio.wait_for(
            process.communicate(input.encode() if input is not None else None),
            timeout=timeout
        )
    except asyncio.TimeoutError:
        await _kill(process)
        raise CommandError(
            cmd, None, message=f"Command '{shlex.join(cmd)}' timed out after {timeout}s"
        )
    except asyncio.CancelledError:
        logger.debug(f"Killing cancelled command: {shlex.join(cmd)}")
        await _kill(process)
        raise
        
    result = CommandResult(
        returncode=process.returncode,
        stdout=stdout.decode(errors="replace") if stdout else "",
        stderr=stderr.decode(errors="replace") if stderr else "",
    )
    logger.debug(f"Command finished with exit status {result.returncode}")
    
    if check and result.returncode != 0:
        raise CommandError(cmd, result.returncode, result.stdout, result.stderr)
        
    return result


async def _kill(process: asyncio.subprocess.Process) -> None:
    """Kill a running process and reap it."""
    if process.returncode is None:
        process.kill()
    await process.wait()
