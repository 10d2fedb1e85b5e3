import logging
from typing import List, Sequence, Tuple, Type

from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_errors import PipelineContractError
from src.commands.interfaces.command_result import CommandResult
from src.commands.pipeline.handler import CallNext, Handler

logger = logging.getLogger(__name__)


class Pipeline:
    """
    Ordered, immutable chain of handlers.

    Handler *i* awaits handler *i+1* through ``call_next``; delegation is
    depth-first and sequential within one task. Exactly one terminal handler
    must exist and it must be last. The editing helpers (insert_before,
    without, ...) return new pipelines and leave this one untouched.

    Usage:
        pipeline = Pipeline([ErrorTranslationHandler(), ..., ExecutionHandler()])
        context, result = await pipeline.run(context)
    """

    def __init__(self, handlers: Sequence[Handler]):
        handlers = tuple(handlers)
        self._validate(handlers)
        self._handlers: Tuple[Handler, ...] = handlers

    @staticmethod
    def _validate(handlers: Tuple[Handler, ...]) -> None:
        if not handlers:
            raise ValueError("Pipeline requires at least one handler")

        for handler in handlers:
            if not isinstance(handler, Handler):
                raise TypeError(f"{handler!r} is not a Handler instance")

        terminals = [h for h in handlers if h.is_terminal]
        if len(terminals) != 1:
            raise ValueError(
                f"Pipeline requires exactly one terminal handler, found {len(terminals)}"
            )
        if not handlers[-1].is_terminal:
            raise ValueError(
                f"Terminal handler {terminals[0].get_handler_name()} must be last in the pipeline"
            )

    @property
    def handlers(self) -> Tuple[Handler, ...]:
        return self._handlers

    def position_of(self, handler_type: Type[Handler]) -> int:
        """
        Ordinal position of the first handler of the given type.

        Raises:
            ValueError: If no such handler is in the pipeline
        """
        for index, handler in enumerate(self._handlers):
            if isinstance(handler, handler_type):
                return index
        raise ValueError(f"{handler_type.__name__} is not in the pipeline")

    def describe(self) -> List[str]:
        return [handler.get_handler_name() for handler in self._handlers]

    async def run(self, context: CommandContext) -> Tuple[CommandContext, CommandResult]:
        """
        Run a context through the chain.

        Returns:
            The same (mutated) context and the result produced by the chain
        """
        logger.debug(
            f"Running '{context.command_name}' (request {context.request_id}) "
            f"through {self.describe()}"
        )
        result = await self._dispatch(0, context)
        return context, result

    async def _dispatch(self, index: int, context: CommandContext) -> CommandResult:
        handler = self._handlers[index]

        if handler.is_terminal:
            return await handler.handle(context, None)

        return await handler.handle(context, self._make_call_next(index, handler))

    def _make_call_next(self, index: int, handler: Handler) -> CallNext:
        calls = 0

        async def call_next(context: CommandContext) -> CommandResult:
            nonlocal calls
            calls += 1
            if calls > 1:
                raise PipelineContractError(
                    f"{handler.get_handler_name()} delegated more than once"
                )
            return await self._dispatch(index + 1, context)

        return call_next

    # Editing helpers

    def insert_before(self, handler_type: Type[Handler], handler: Handler) -> "Pipeline":
        position = self.position_of(handler_type)
        handlers = list(self._handlers)
        handlers.insert(position, handler)
        return Pipeline(handlers)

    def insert_after(self, handler_type: Type[Handler], handler: Handler) -> "Pipeline":
        position = self.position_of(handler_type)
        handlers = list(self._handlers)
        handlers.insert(position + 1, handler)
        return Pipeline(handlers)

    def without(self, handler_type: Type[Handler]) -> "Pipeline":
        self.position_of(handler_type)
        return Pipeline([h for h in self._handlers if not isinstance(h, handler_type)])

    def replace(self, handler_type: Type[Handler], handler: Handler) -> "Pipeline":
        position = self.position_of(handler_type)
        handlers = list(self._handlers)
        handlers[position] = handler
        return Pipeline(handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        return f"Pipeline({' -> '.join(self.describe())})"
