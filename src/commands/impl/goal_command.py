from typing import Any, List, Optional

from src.commands.interfaces.command import Command
from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_errors import UnauthorizedError
from src.commands.validation.rules import ExistsRule, FieldRule, IntegerRule, PresenceRule
from src.core.auth.token_registry import Identity


async def goal_exists(context: CommandContext, goal_id: Any) -> bool:
    return await context.goal_repository.exists(goal_id)


async def goal_title_taken(context: CommandContext, title: str) -> bool:
    """Title clash among the caller's goals, ignoring the goal being edited"""
    if context.identity is None or not isinstance(title, str):
        return False
    goal = await context.goal_repository.get(context.get_field("id"))
    return await context.goal_repository.title_taken(
        context.identity.user_id, title, exclude_id=goal["id"] if goal else None
    )


class GoalCommand(Command):
    """Base for commands that target a single goal through its ``id`` field"""

    FIELDS = ("id",)

    def goal_id_rules(self) -> List[FieldRule]:
        return [
            PresenceRule("id"),
            IntegerRule("id"),
            ExistsRule("id", goal_exists),
        ]

    def get_validation_rules(self) -> List[FieldRule]:
        return self.goal_id_rules()

    async def get_resource_owner_id(self, context: CommandContext) -> Optional[int]:
        goal = await context.goal_repository.get(context.get_field("id"))
        return goal["owner_id"] if goal else None

    def require_identity(self, context: CommandContext) -> Identity:
        if context.identity is None:
            raise UnauthorizedError(
                f"'{self.get_command_name()}' requires an authenticated caller"
            )
        return context.identity
