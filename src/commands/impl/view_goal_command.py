from src.commands.impl.goal_command import GoalCommand
from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult


class ViewGoalCommand(GoalCommand):
    """Returns a single goal"""

    def get_command_name(self) -> str:
        return "view_goal"

    def is_cacheable(self) -> bool:
        return True

    async def execute(self, context: CommandContext) -> CommandResult:
        goal = await context.goal_repository.get(context.get_field("id"))
        return self.build_success(context, goal)
