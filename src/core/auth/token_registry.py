import logging
import secrets
import threading
from dataclasses import dataclass
from typing import Dict, Optional

from src.config.constants import ROLE_ADMIN, ROLE_MEMBER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Caller identity resolved from an authentication token"""

    user_id: int
    role: str = ROLE_MEMBER

    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class TokenRegistry:
    """
    Registry of issued bearer tokens.

    Tokens are opaque random strings mapped to an Identity. Access is guarded
    by a lock so concurrent requests can issue and resolve tokens safely.
    """

    def __init__(self) -> None:
        self._tokens: Dict[str, Identity] = {}
        self._lock = threading.Lock()

    def issue(self, user_id: int, role: str = ROLE_MEMBER) -> str:
        """
        Issue a new token for a user.

        Args:
            user_id: Identifier of the user the token authenticates
            role: Role granted to the token holder

        Returns:
            Newly generated token string
        """
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._tokens[token] = Identity(user_id=user_id, role=role)
        logger.debug(f"Issued {role} token for user {user_id}")
        return token

    def register(self, token: str, identity: Identity) -> None:
        """Register a pre-shared token (e.g. a bootstrap admin token)"""
        if not token:
            raise ValueError("token must not be empty")
        with self._lock:
            self._tokens[token] = identity

    def resolve(self, token: Optional[str]) -> Optional[Identity]:
        """Return the identity for a token, or None if missing or unknown"""
        if not token:
            return None
        with self._lock:
            return self._tokens.get(token)

    def revoke(self, token: str) -> bool:
        with self._lock:
            return self._tokens.pop(token, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)
