import time
from typing import Optional

from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_errors import PipelineContractError
from src.commands.interfaces.command_result import CommandResult
from src.commands.pipeline.handler import CallNext, Handler


class ExecutionHandler(Handler):
    """
    Terminal handler: runs the command's business logic.

    Records the payload on the context (the only place the result is set)
    and never delegates further.
    """

    is_terminal = True

    async def handle(
        self, context: CommandContext, call_next: Optional[CallNext] = None
    ) -> CommandResult:
        command = context.require_command()

        start_time = time.time()
        result = await command.execute(context)
        execution_time_ms = (time.time() - start_time) * 1000

        if not isinstance(result, CommandResult):
            raise PipelineContractError(
                f"Command '{command.get_command_name()}' returned "
                f"{type(result).__name__}, expected CommandResult"
            )

        if result.execution_time_ms == 0:
            result.execution_time_ms = execution_time_ms

        if result.is_success():
            context.set_result(result.data)

        self.logger.info(
            f"Command '{command.get_command_name()}' completed "
            f"{'successfully' if result.is_success() else 'with errors'} "
            f"for request {context.request_id} in {execution_time_ms:.2f}ms"
        )
        return result
