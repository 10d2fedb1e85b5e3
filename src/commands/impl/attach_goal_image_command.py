from typing import List

from src.commands.impl.goal_command import GoalCommand
from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult
from src.commands.validation.rules import ContentTypeRule, FieldRule, PresenceRule, UriRule
from src.config.constants import ALLOWED_IMAGE_CONTENT_TYPES


class AttachGoalImageCommand(GoalCommand):
    """Attaches a banner image (by URL) to a goal"""

    FIELDS = ("id", "image_url", "content_type")

    def get_command_name(self) -> str:
        return "attach_goal_image"

    def invalidates_cache(self) -> bool:
        return True

    def get_validation_rules(self) -> List[FieldRule]:
        return self.goal_id_rules() + [
            PresenceRule("image_url"),
            UriRule("image_url"),
            PresenceRule("content_type"),
            ContentTypeRule("content_type", ALLOWED_IMAGE_CONTENT_TYPES),
        ]

    async def execute(self, context: CommandContext) -> CommandResult:
        goal = await context.goal_repository.update(
            context.get_field("id"),
            {
                "image_url": context.get_field("image_url").strip(),
                "image_content_type": context.get_field("content_type").split(";", 1)[0].strip().lower(),
            },
        )
        return self.build_success(context, goal)
