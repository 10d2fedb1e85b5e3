import time
from typing import Optional

from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_errors import PipelineError
from src.commands.interfaces.command_result import CommandResult, ErrorCategory
from src.commands.pipeline.handler import CallNext, Handler
from src.commands.pipeline.responses import render_failure


class ErrorTranslationHandler(Handler):
    """
    Outermost handler: turns every failure into a boundary response.

    Catches categorized PipelineErrors and any other exception raised by the
    inner chain, and also renders failure results that inner handlers
    returned instead of raising. Nothing escapes this handler.
    """

    async def handle(
        self, context: CommandContext, call_next: Optional[CallNext]
    ) -> CommandResult:
        start_time = time.time()

        try:
            result = await call_next(context)

        except PipelineError as e:
            self.logger.warning(
                f"Command '{context.command_name}' failed for request "
                f"{context.request_id}: {e.category.value} - {e.message}"
            )
            result = CommandResult.failure(
                request_id=context.request_id,
                command_name=context.command_name,
                category=e.category,
                error_message=e.message,
                error_details=e.details,
            )

        except Exception as e:
            self.logger.error(
                f"Command '{context.command_name}' raised exception for request "
                f"{context.request_id}: {str(e)}",
                exc_info=True,
            )
            result = CommandResult.failure(
                request_id=context.request_id,
                command_name=context.command_name,
                category=ErrorCategory.UNCLASSIFIED,
                error_message=str(e),
                error_details={"exception_type": type(e).__name__},
            )

        if result.is_failure():
            if result.error_category == ErrorCategory.UNCLASSIFIED:
                self.logger.error(
                    f"Unclassified failure in '{context.command_name}' for request "
                    f"{context.request_id}: {result.error_message}"
                )
            context.response = render_failure(result)

        if result.execution_time_ms == 0:
            result.execution_time_ms = (time.time() - start_time) * 1000

        return result
