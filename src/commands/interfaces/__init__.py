"""
Command pattern interfaces for the goal tracker.
"""

from .command import Command
from .command_context import CommandContext, PipelineResponse
from .command_errors import (
    CommandValidationError,
    ForbiddenError,
    PipelineContractError,
    PipelineError,
    UnauthorizedError,
)
from .command_result import CommandResult, CommandStatus, ErrorCategory

__all__ = [
    "Command",
    "CommandContext",
    "CommandResult",
    "CommandStatus",
    "CommandValidationError",
    "ErrorCategory",
    "ForbiddenError",
    "PipelineContractError",
    "PipelineError",
    "PipelineResponse",
    "UnauthorizedError",
]
