from typing import Optional

from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult, ErrorCategory
from src.commands.pipeline.handler import CallNext, Handler
from src.config.access_policy_loader import AccessPolicyLoader


class OwnershipHandler(Handler):
    """
    Verifies the caller owns the targeted resource, for policies that ask.

    Resolves the identity itself so it still answers "unauthorized" when
    placed ahead of the authorization handler. A missing resource is let
    through; reporting it is the validation handler's job.
    """

    def __init__(self, policy_loader: AccessPolicyLoader):
        super().__init__()
        self._policy_loader = policy_loader

    async def handle(
        self, context: CommandContext, call_next: Optional[CallNext]
    ) -> CommandResult:
        policy = self._policy_loader.get_policy(context.command_name)
        if policy is None or not policy.requires_ownership:
            return await call_next(context)

        identity = context.identity or context.token_registry.resolve(context.auth_token)
        if identity is None:
            return self.fail(
                context,
                ErrorCategory.UNAUTHORIZED,
                "Authentication is required to access this resource",
            )
        context.identity = identity

        owner_id = await context.require_command().get_resource_owner_id(context)
        if owner_id is not None and owner_id != identity.user_id:
            return self.fail(
                context,
                ErrorCategory.FORBIDDEN,
                "You do not own this resource",
            )

        return await call_next(context)
