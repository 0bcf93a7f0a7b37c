"""Logging utilities."""

import logging
import sys


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO"):
    """Setup logging for a CLI run.
    
    Records go to stderr so tables printed on stdout stay clean. Calling
    again replaces the previous handlers.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
    
    # Subprocess transport chatter
    logging.getLogger("asyncio").setLevel(logging.WARNING)
