from typing import Optional

from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult, ErrorCategory
from src.commands.pipeline.handler import CallNext, Handler
from src.commands.validation.rules import evaluate_rules


class ValidationHandler(Handler):
    """
    Runs the command's field rules and its cross-field hook.

    All rules run (no fail-fast); if any error was collected the chain stops
    with a validation failure carrying the complete per-field error set.
    """

    async def handle(
        self, context: CommandContext, call_next: Optional[CallNext]
    ) -> CommandResult:
        command = context.require_command()

        failed = await evaluate_rules(command.get_validation_rules(), context)
        await command.validate(context)

        if not context.errors.is_empty():
            self.logger.debug(
                f"{failed} rule(s) failed for '{context.command_name}': "
                f"{context.errors.fields()}"
            )
            return self.fail(
                context,
                ErrorCategory.VALIDATION,
                "Validation failed",
                {"errors": context.errors.to_dict()},
            )

        return await call_next(context)
