from typing import List

from src.commands.impl.goal_command import GoalCommand, goal_title_taken
from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult
from src.commands.validation.rules import FieldRule, LengthRule, PresenceRule, UniqueRule, UriRule
from src.config.constants import (
    GOAL_DESCRIPTION_MAX_LENGTH,
    GOAL_TITLE_MAX_LENGTH,
    GOAL_TITLE_MIN_LENGTH,
)


class CreateGoalCommand(GoalCommand):
    """Creates a goal owned by the caller"""

    FIELDS = ("title", "description", "url")

    def get_command_name(self) -> str:
        return "create_goal"

    def invalidates_cache(self) -> bool:
        return True

    def get_validation_rules(self) -> List[FieldRule]:
        return [
            PresenceRule("title"),
            LengthRule("title", minimum=GOAL_TITLE_MIN_LENGTH, maximum=GOAL_TITLE_MAX_LENGTH),
            UniqueRule("title", goal_title_taken),
            LengthRule("description", maximum=GOAL_DESCRIPTION_MAX_LENGTH),
            UriRule("url"),
        ]

    async def get_resource_owner_id(self, context: CommandContext) -> None:
        return None

    async def execute(self, context: CommandContext) -> CommandResult:
        identity = self.require_identity(context)

        goal = await context.goal_repository.create(
            owner_id=identity.user_id,
            title=context.get_field("title").strip(),
            description=context.get_field("description"),
            url=context.get_field("url"),
        )
        return self.build_success(context, goal)
