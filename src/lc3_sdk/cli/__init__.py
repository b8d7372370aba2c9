"""
LC-3 SDK Command-Line Interface
===============================

This package provides command-line tools for the LC-3 SDK:

- **lc3asm**: Assembler (source to object file, listing, symbols)
- **lc3run**: Emulator (runs an object file or assembles and runs source)

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

import logging

from lc3_sdk.config import ToolchainConfig


def setup_logging(verbose: bool, config: ToolchainConfig) -> None:
    """Configure logging: DEBUG when verbose, otherwise the configured level."""
    level = logging.DEBUG if verbose else config.logging_level()
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(name)s: %(message)s" if verbose else "%(levelname)s: %(message)s",
    )


__all__ = ["lc3asm", "lc3run", "setup_logging"]
