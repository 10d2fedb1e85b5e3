from typing import Optional

from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult, ErrorCategory
from src.commands.pipeline.handler import CallNext, Handler
from src.config.access_policy_loader import AccessPolicyLoader


class AuthorizationHandler(Handler):
    """
    Checks the presented credential against the command's access policy.

    - no policy registered: forbidden
    - public policy: delegates (resolving the identity if a token was sent)
    - credential missing or unknown: unauthorized
    - admin required but caller is not an admin: forbidden
    """

    def __init__(self, policy_loader: AccessPolicyLoader):
        super().__init__()
        self._policy_loader = policy_loader

    async def handle(
        self, context: CommandContext, call_next: Optional[CallNext]
    ) -> CommandResult:
        policy = self._policy_loader.get_policy(context.command_name)
        if policy is None:
            return self.fail(
                context,
                ErrorCategory.FORBIDDEN,
                f"No access policy registered for '{context.command_name}'",
            )

        identity = context.identity or context.token_registry.resolve(context.auth_token)
        if identity is not None:
            context.identity = identity

        if policy.is_public():
            return await call_next(context)

        if identity is None:
            message = (
                "Authentication token is missing"
                if not context.auth_token
                else "Authentication token is invalid"
            )
            return self.fail(context, ErrorCategory.UNAUTHORIZED, message)

        if policy.requires_admin() and not identity.is_admin():
            return self.fail(
                context,
                ErrorCategory.FORBIDDEN,
                f"'{context.command_name}' requires admin privileges",
            )

        return await call_next(context)
