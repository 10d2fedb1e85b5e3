"""
Command registry for dependency injection and context factory functionality.
"""

from .command_registry import CommandRegistry

__all__ = ["CommandRegistry"]
