"""
Failure taxonomy for the command pipeline.

Handlers and commands may raise these instead of returning a failure
CommandResult; the error translation handler converts both forms into the
same response. Anything that is not a PipelineError is unclassified.
"""

from typing import Any, Dict, Optional

from .command_result import ErrorCategory


class PipelineError(Exception):
    """Base class for categorized pipeline failures"""

    category: ErrorCategory = ErrorCategory.UNCLASSIFIED

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class UnauthorizedError(PipelineError):
    """No valid credential was presented"""

    category = ErrorCategory.UNAUTHORIZED


class ForbiddenError(PipelineError):
    """Valid credential, but insufficient privilege or not the resource owner"""

    category = ErrorCategory.FORBIDDEN


class CommandValidationError(PipelineError):
    """One or more validation rules failed; carries the complete error set"""

    category = ErrorCategory.VALIDATION

    def __init__(self, errors: Dict[str, Any], message: str = "Validation failed"):
        super().__init__(message, details={"errors": errors})
        self.errors = errors


class PipelineContractError(RuntimeError):
    """A handler or command broke the pipeline contract (programming error)"""
