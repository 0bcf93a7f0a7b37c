"""Exception hierarchy for lxd-kitchen."""

from typing import List, Optional


class LxdKitchenError(Exception):
    """Base class for all lxd-kitchen errors."""
    pass


class ConfigurationError(LxdKitchenError):
    """Invalid or incomplete configuration."""
    pass


class CommandError(LxdKitchenError):
    """An external command exited with a non-zero status."""
    
    def __init__(
        self,
        cmd: List[str],
        returncode: Optional[int],
        stdout: str = "",
        stderr: str = "",
        message: Optional[str] = None,
    ):
        self.cmd = cmd
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        if message is None:
            message = f"Command '{' '.join(cmd)}' returned non-zero exit status {returncode}"
            if stderr.strip():
                message += f": {stderr.strip()}"
        super().__init__(message)


class ParseError(LxdKitchenError):
    """Hypervisor output is missing an expected field."""
    pass


class WaitTimeout(LxdKitchenError):
    """A convergence loop ran out of time or attempts."""
    
    def __init__(self, description: str, attempts: int, elapsed: float):
        self.description = description
        self.attempts = attempts
        self.elapsed = elapsed
        super().__init__(
            f"Timed out waiting for {description} "
            f"after {attempts} attempts ({elapsed:.1f}s)"
        )
