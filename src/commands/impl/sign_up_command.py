from typing import List

from src.commands.interfaces.command import Command
from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult
from src.commands.validation.rules import (
    FieldRule,
    FormatRule,
    LengthRule,
    PresenceRule,
    UniqueRule,
)
from src.config.constants import (
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
    USERNAME_PATTERN,
)


async def _username_taken(context: CommandContext, username: str) -> bool:
    if not isinstance(username, str):
        return False
    return await context.user_repository.username_taken(username)


class SignUpCommand(Command):
    """Registers a user and issues a login token for them"""

    FIELDS = ("username",)

    def get_command_name(self) -> str:
        return "sign_up"

    def get_validation_rules(self) -> List[FieldRule]:
        return [
            PresenceRule("username"),
            LengthRule("username", minimum=USERNAME_MIN_LENGTH, maximum=USERNAME_MAX_LENGTH),
            FormatRule(
                "username",
                USERNAME_PATTERN,
                message="may only contain lowercase letters, digits and underscores",
            ),
            UniqueRule("username", _username_taken),
        ]

    async def execute(self, context: CommandContext) -> CommandResult:
        user = await context.user_repository.create(context.get_field("username"))
        token = context.token_registry.issue(user["id"], user["role"])

        self.logger.info(f"Signed up user {user['id']} for request {context.request_id}")
        return self.build_success(
            context,
            {
                "user_id": user["id"],
                "username": user["username"],
                "role": user["role"],
                "token": token,
            },
        )
