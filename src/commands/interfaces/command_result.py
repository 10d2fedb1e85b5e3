from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class CommandStatus(str, Enum):
    """Outcome of a pipeline run"""

    SUCCESS = "success"
    FAILURE = "failure"


class ErrorCategory(str, Enum):
    """Failure categories understood by the error translation handler"""

    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    VALIDATION = "validation"
    UNCLASSIFIED = "unclassified"


@dataclass
class CommandResult:
    """
    Explicit result of running a command through the pipeline.

    Handlers return a CommandResult instead of relying on exceptions to
    short-circuit the chain: a SUCCESS result carries the payload (or None
    for "no content"), a FAILURE result carries its ErrorCategory and the
    details needed to build a response.
    """

    status: CommandStatus
    request_id: str
    command_name: str
    execution_time_ms: float = 0.0

    data: Optional[Any] = None

    error_category: Optional[ErrorCategory] = None
    error_message: Optional[str] = None
    error_details: Dict[str, Any] = field(default_factory=dict)

    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(
        cls,
        request_id: str,
        command_name: str,
        execution_time_ms: float = 0.0,
        data: Optional[Any] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "CommandResult":
        """Create a successful result; data=None means no content"""
        return cls(
            status=CommandStatus.SUCCESS,
            request_id=request_id,
            command_name=command_name,
            execution_time_ms=execution_time_ms,
            data=data,
            metadata=metadata or {},
        )

    @classmethod
    def failure(
        cls,
        request_id: str,
        command_name: str,
        category: ErrorCategory,
        error_message: str,
        error_details: Optional[Dict[str, Any]] = None,
        execution_time_ms: float = 0.0,
    ) -> "CommandResult":
        """Create a failed result in the given category"""
        return cls(
            status=CommandStatus.FAILURE,
            request_id=request_id,
            command_name=command_name,
            execution_time_ms=execution_time_ms,
            error_category=category,
            error_message=error_message,
            error_details=error_details or {},
        )

    def is_success(self) -> bool:
        return self.status == CommandStatus.SUCCESS

    def is_failure(self) -> bool:
        return self.status == CommandStatus.FAILURE

    def has_data(self) -> bool:
        return self.data is not None

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = value
