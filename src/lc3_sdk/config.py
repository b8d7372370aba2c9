"""
LC-3 SDK - Configuration
========================

Toolchain configuration shared by the assembler, emulator and CLI tools.
Configuration can come from:
- Default values (defined here)
- Environment variables (``ToolchainConfig.from_env()``)
- Command-line options (the CLI tools override individual fields)

Environment variables (all optional):
    LC3_MAX_STEPS: Default step budget for ``run`` (integer)
    LC3_MAX_ERRORS: Assembler error cap (integer)
    LC3_IN_PROMPT: Prompt printed by the IN trap
    LC3_LOG_LEVEL: Logging level name (DEBUG, INFO, WARNING, ...)
"""

from dataclasses import dataclass
import logging
import os


@dataclass
class ToolchainConfig:
    """
    Configuration for assembling and running LC-3 programs.

    Attributes:
        max_steps: Instructions ``run`` executes before giving up on a
            program that never halts (default: 1,000,000)
        max_errors: Errors the assembler collects before it stops (default: 100)
        in_prompt: Text the IN trap writes before reading a character
        log_level: Logging level name used by the CLI tools
    """

    max_steps: int = 1_000_000
    max_errors: int = 100
    in_prompt: str = "Input a character> "
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "ToolchainConfig":
        """
        Create a ToolchainConfig from environment variables.

        Invalid numeric values are ignored and the default is kept.

        Returns:
            ToolchainConfig with values from environment variables
        """
        config = cls()

        if max_steps := os.environ.get("LC3_MAX_STEPS"):
            try:
                config.max_steps = int(max_steps)
            except ValueError:
                pass

        if max_errors := os.environ.get("LC3_MAX_ERRORS"):
            try:
                config.max_errors = int(max_errors)
            except ValueError:
                pass

        if in_prompt := os.environ.get("LC3_IN_PROMPT"):
            config.in_prompt = in_prompt

        if log_level := os.environ.get("LC3_LOG_LEVEL"):
            if log_level.upper() in logging.getLevelNamesMapping():
                config.log_level = log_level.upper()

        return config

    def logging_level(self) -> int:
        """Return ``log_level`` as a ``logging`` module constant."""
        return logging.getLevelNamesMapping().get(self.log_level.upper(), logging.WARNING)
