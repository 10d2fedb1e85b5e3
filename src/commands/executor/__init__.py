"""
Command executor for running commands through the pipeline with logging
and metrics collection.
"""

from .command_executor import CommandExecutor

__all__ = ["CommandExecutor"]
