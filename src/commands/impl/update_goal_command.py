from typing import List

from src.commands.impl.goal_command import GoalCommand, goal_title_taken
from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult
from src.commands.validation.rules import FieldRule, LengthRule, UniqueRule, UriRule, is_blank
from src.config.constants import (
    GOAL_DESCRIPTION_MAX_LENGTH,
    GOAL_TITLE_MAX_LENGTH,
    GOAL_TITLE_MIN_LENGTH,
)

EDITABLE_FIELDS = ("title", "description", "url")


class UpdateGoalCommand(GoalCommand):
    """Changes the title, description or url of a goal"""

    FIELDS = ("id",) + EDITABLE_FIELDS

    def get_command_name(self) -> str:
        return "update_goal"

    def invalidates_cache(self) -> bool:
        return True

    def get_validation_rules(self) -> List[FieldRule]:
        return self.goal_id_rules() + [
            LengthRule("title", minimum=GOAL_TITLE_MIN_LENGTH, maximum=GOAL_TITLE_MAX_LENGTH),
            UniqueRule("title", goal_title_taken),
            LengthRule("description", maximum=GOAL_DESCRIPTION_MAX_LENGTH),
            UriRule("url"),
        ]

    async def validate(self, context: CommandContext) -> None:
        if not any(context.has_field(name) for name in EDITABLE_FIELDS):
            context.errors.add(
                "base", "changes", f"at least one of {', '.join(EDITABLE_FIELDS)} is required"
            )
        if context.has_field("title") and is_blank(context.get_field("title")):
            context.errors.add("title", "presence", "can't be blank")

    async def execute(self, context: CommandContext) -> CommandResult:
        changes = {
            name: context.get_field(name)
            for name in EDITABLE_FIELDS
            if context.has_field(name)
        }
        if "title" in changes:
            changes["title"] = changes["title"].strip()

        goal = await context.goal_repository.update(context.get_field("id"), changes)
        return self.build_success(context, goal)
