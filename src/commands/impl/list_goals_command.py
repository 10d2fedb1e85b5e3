from typing import List

from src.commands.impl.goal_command import GoalCommand
from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult
from src.commands.validation.rules import FieldRule


class ListGoalsCommand(GoalCommand):
    """Lists the caller's own goals"""

    FIELDS = ()

    def get_command_name(self) -> str:
        return "list_goals"

    def get_validation_rules(self) -> List[FieldRule]:
        return []

    def is_cacheable(self) -> bool:
        return True

    async def execute(self, context: CommandContext) -> CommandResult:
        identity = self.require_identity(context)
        goals = await context.goal_repository.list_for_owner(identity.user_id)
        return self.build_success(context, {"goals": goals, "count": len(goals)})


class ListAllGoalsCommand(ListGoalsCommand):
    """Lists every goal in the system (admin only)"""

    def get_command_name(self) -> str:
        return "list_all_goals"

    def is_cacheable(self) -> bool:
        return False

    async def execute(self, context: CommandContext) -> CommandResult:
        goals = await context.goal_repository.list_all()
        return self.build_success(context, {"goals": goals, "count": len(goals)})
