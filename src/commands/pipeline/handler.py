from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional
import logging

from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult, ErrorCategory

CallNext = Callable[[CommandContext], Awaitable[CommandResult]]


class Handler(ABC):
    """
    One stage of the command pipeline.

    A non-terminal handler receives the context and a ``call_next`` callable.
    It may run logic before and/or after awaiting ``call_next`` at most once,
    or return a result without delegating to short-circuit the rest of the
    chain. The terminal handler receives ``call_next=None``.
    """

    is_terminal: bool = False

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    async def handle(
        self, context: CommandContext, call_next: Optional[CallNext]
    ) -> CommandResult:
        pass

    def fail(
        self,
        context: CommandContext,
        category: ErrorCategory,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> CommandResult:
        """Build a failure result that stops the chain at this handler"""
        self.logger.info(
            f"{self.get_handler_name()} stopped '{context.command_name}' "
            f"(request {context.request_id}): {category.value} - {message}"
        )
        return CommandResult.failure(
            request_id=context.request_id,
            command_name=context.command_name,
            category=category,
            error_message=message,
            error_details=details,
        )

    def get_handler_name(self) -> str:
        return self.__class__.__name__

    def __repr__(self) -> str:
        return f"{self.get_handler_name()}(terminal={self.is_terminal})"
