from src.commands.impl.goal_command import GoalCommand
from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult


class DeleteGoalCommand(GoalCommand):
    """Deletes a goal; produces no content"""

    def get_command_name(self) -> str:
        return "delete_goal"

    def invalidates_cache(self) -> bool:
        return True

    async def execute(self, context: CommandContext) -> CommandResult:
        await context.goal_repository.delete(context.get_field("id"))
        return self.build_success(context, None)
