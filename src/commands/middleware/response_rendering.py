from typing import Optional

from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult
from src.commands.pipeline.handler import CallNext, Handler
from src.commands.pipeline.responses import render_success


class ResponseRenderingHandler(Handler):
    """
    Delegates first, then converts a successful result into the response.

    Absent data renders as 204 No Content, present data as 200 with the
    payload. Failures pass through untouched for the error translation
    handler. The result itself is returned unchanged.
    """

    async def handle(
        self, context: CommandContext, call_next: Optional[CallNext]
    ) -> CommandResult:
        result = await call_next(context)

        if result.is_success():
            context.response = render_success(result)

        return result
