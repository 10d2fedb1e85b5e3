"""
Access policy definitions for commands.

An access policy states which credential category a command requires and
whether the caller must own the resource the command targets. Policies are
loaded from JSON via AccessPolicyLoader so the rules table can be swapped
without touching command code.
"""

from dataclasses import dataclass
from typing import Optional

from src.config.constants import CREDENTIAL_ADMIN, CREDENTIAL_LOGIN


@dataclass(frozen=True)
class AccessPolicy:
    """Access requirements for a single command."""

    # Name of the command this policy applies to
    command_name: str

    # None for public commands, otherwise "login" or "admin"
    required_credential: Optional[str] = None

    # Whether the caller must own the targeted resource
    requires_ownership: bool = False

    def is_public(self) -> bool:
        return self.required_credential is None

    def requires_admin(self) -> bool:
        return self.required_credential == CREDENTIAL_ADMIN

    def requires_login(self) -> bool:
        return self.required_credential in (CREDENTIAL_LOGIN, CREDENTIAL_ADMIN)
