import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, Mapping, Optional

from src.commands.interfaces.command_errors import PipelineContractError
from src.commands.validation.validation_errors import ValidationErrors
from src.core.auth.token_registry import Identity, TokenRegistry
from src.repositories.goal_repository import GoalRepository
from src.repositories.user_repository import UserRepository

if TYPE_CHECKING:
    from src.commands.interfaces.command import Command

logger = logging.getLogger(__name__)

_UNSET = object()


@dataclass
class PipelineResponse:
    """Transport-level response produced at the pipeline boundary"""

    status_code: int
    body: Optional[Any] = None


@dataclass
class CommandContext:
    """
    Mutable object representing one unit of requested work and its outcome.

    A context is built fresh per request from the raw input fields, passed by
    reference through the pipeline and mutated in place by handlers
    (validation errors added, identity resolved, result and response set).
    """

    # Core execution parameters
    request_id: str
    command_name: str

    # Dependencies (injected by command registry)
    goal_repository: GoalRepository
    user_repository: UserRepository
    token_registry: TokenRegistry

    # Command whose business logic the execution handler runs
    command: Optional["Command"] = None

    # Recognized input fields only (see from_fields)
    fields: Dict[str, Any] = field(default_factory=dict)
    auth_token: Optional[str] = None

    # Populated while the pipeline runs
    identity: Optional[Identity] = None
    errors: ValidationErrors = field(default_factory=ValidationErrors)
    response: Optional[PipelineResponse] = None
    metadata: Optional[Dict[str, Any]] = None

    _result: Any = field(default=_UNSET, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate context after initialization"""
        if not self.request_id:
            raise ValueError("request_id is required")
        if not self.command_name:
            raise ValueError("command_name is required")
        if self.goal_repository is None:
            raise ValueError("goal_repository is required")
        if self.user_repository is None:
            raise ValueError("user_repository is required")
        if self.token_registry is None:
            raise ValueError("token_registry is required")

    @classmethod
    def from_fields(
        cls,
        raw_fields: Optional[Mapping[str, Any]],
        recognized_fields: Iterable[str],
        **kwargs: Any,
    ) -> "CommandContext":
        """
        Build a context keeping only the recognized input fields.

        Args:
            raw_fields: Field mapping delivered by the transport
            recognized_fields: Field names the command declares
            **kwargs: Remaining CommandContext constructor arguments
        """
        recognized = tuple(recognized_fields)
        raw_fields = raw_fields or {}

        unknown = sorted(name for name in raw_fields if name not in recognized)
        if unknown:
            logger.debug(
                f"Ignoring unrecognized fields for '{kwargs.get('command_name')}': {unknown}"
            )

        fields = {name: raw_fields[name] for name in recognized if name in raw_fields}
        return cls(fields=fields, **kwargs)

    def require_command(self) -> "Command":
        """Return the bound command or fail loudly if none was bound"""
        if self.command is None:
            raise PipelineContractError(
                f"No command bound to context for '{self.command_name}'"
            )
        return self.command

    def get_field(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def has_field(self, name: str) -> bool:
        return name in self.fields

    @property
    def result(self) -> Any:
        """Result payload, or None while unset"""
        return None if self._result is _UNSET else self._result

    def has_result(self) -> bool:
        return self._result is not _UNSET

    def set_result(self, value: Any) -> None:
        """
        Record the result payload.

        Raises:
            PipelineContractError: If a result was already set or validation
                errors are present
        """
        if self.has_result():
            raise PipelineContractError(
                f"Result already set for command '{self.command_name}'"
            )
        if not self.errors.is_empty():
            raise PipelineContractError(
                f"Cannot set result for command '{self.command_name}' with validation errors"
            )
        self._result = value

    def get_metadata(self, key: str, default: Any = None) -> Any:
        """Get metadata value with fallback"""
        if self.metadata is None:
            return default
        return self.metadata.get(key, default)

    def add_metadata(self, key: str, value: Any) -> None:
        """Add metadata key-value pair"""
        if self.metadata is None:
            self.metadata = {}
        self.metadata[key] = value
