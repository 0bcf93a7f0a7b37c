"""Convergence loop for externally owned, slowly settling state."""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, TypeVar

from lxdkitchen.exceptions import WaitTimeout
from lxdkitchen.models.config import WaitConfig


logger = logging.getLogger(__name__)

T = TypeVar("T")

# A check returns a falsy value while the condition does not hold yet
WaitCheck = Callable[[], Awaitable[Optional[T]]]


async def wait_for(
    check: WaitCheck,
    description: str,
    interval: float = 0.3,
    timeout: Optional[float] = None,
    max_attempts: Optional[int] = None,
) -> T:
    """Call ``check`` every ``interval`` seconds until it returns a truthy value.
    
    Returns the value produced by the successful check. Without ``timeout``
    and ``max_attempts`` the loop never gives up; otherwise ``WaitTimeout``
    is raised once either bound is reached. Exceptions raised by ``check``
    are not retried. Cancelling the awaiting task stops the loop between
    attempts.
    """
    started = time.monotonic()
    attempts = 0
    
    while True:
        attempts += 1
        result = await check()
        if result:
            logger.debug(f"Done waiting for {description} after {attempts} attempts")
            return result
            
        elapsed = time.monotonic() - started
        if max_attempts is not None and attempts >= max_attempts:
            raise WaitTimeout(description, attempts, elapsed)
        if timeout is not None and elapsed + interval > timeout:
            raise WaitTimeout(description, attempts, elapsed)
            
        logger.debug(f"Still waiting for {description}...")
        await asyncio.sleep(interval)


async def wait_with(config: WaitConfig, check: WaitCheck, description: str) -> T:
    """Run ``wait_for`` with bounds taken from configuration."""
    return await wait_for(
        check,
        description,
        interval=config.interval,
        timeout=config.timeout,
        max_attempts=config.max_attempts,
    )
