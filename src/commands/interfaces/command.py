from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple
import logging
from .command_context import CommandContext
from .command_result import CommandResult
from src.commands.validation.rules import FieldRule


class Command(ABC):
    """
    Base interface for all commands in the goal tracker.

    A command is one kind of requested work ("delete goal"). It declares the
    input fields it recognizes, the validation rules that guard it and the
    business logic the terminal execution handler runs. Cross-cutting
    concerns (authorization, validation, ownership, rendering, error
    translation) live in pipeline handlers, not here.

    All commands must implement:
    - get_command_name(): Unique identifier, also the access policy key
    - execute(): The business logic
    """

    # Names of the input fields this command recognizes
    FIELDS: Tuple[str, ...] = ()

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def get_command_name(self) -> str:
        """
        Return unique identifier for this command.

        Used for logging, the command registry and the access policy lookup.
        Should be lowercase with underscores (e.g., 'delete_goal').
        """
        pass

    @abstractmethod
    async def execute(self, context: CommandContext) -> CommandResult:
        """
        Execute the command's business logic.

        Only called by the execution handler, after every preceding handler
        has delegated. Return CommandResult.success(data=None) for commands
        that produce no content.

        Args:
            context: CommandContext with validated fields and resolved identity

        Returns:
            CommandResult with the result payload
        """
        pass

    def get_field_names(self) -> Tuple[str, ...]:
        return tuple(self.FIELDS)

    def get_validation_rules(self) -> List[FieldRule]:
        """
        Return field-level rules in evaluation order.

        Default implementation declares no rules.
        """
        return []

    async def validate(self, context: CommandContext) -> None:
        """
        Cross-field validation hook, run after the field rules.

        Override to add errors with context.errors.add(); do not raise.
        """
        return None

    async def get_resource_owner_id(self, context: CommandContext) -> Optional[int]:
        """
        Return the owner id of the resource this command targets.

        Only consulted when the command's access policy requires ownership.
        Return None when the resource does not exist.
        """
        return None

    def is_cacheable(self) -> bool:
        """Whether a successful result may be served from cache"""
        return False

    def invalidates_cache(self) -> bool:
        """Whether a successful run makes cached reads stale"""
        return False

    def build_success(
        self, context: CommandContext, data: Any = None
    ) -> CommandResult:
        return CommandResult.success(
            request_id=context.request_id,
            command_name=self.get_command_name(),
            data=data,
        )

    def __str__(self) -> str:
        """String representation of the command"""
        return f"{self.__class__.__name__}(name='{self.get_command_name()}')"

    def __repr__(self) -> str:
        """Detailed string representation of the command"""
        return (
            f"{self.__class__.__name__}("
            f"name='{self.get_command_name()}', "
            f"fields={list(self.get_field_names())}, "
            f"cacheable={self.is_cacheable()}"
            f")"
        )
