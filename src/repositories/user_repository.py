import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from src.config.constants import ROLE_MEMBER, USERS_PREFIX
from src.core.storage.interface import StorageInterface
from src.repositories.goal_repository import SequenceAllocator, coerce_id

logger = logging.getLogger(__name__)


class UserRepository:
    """User records stored as ``users/<id>.json``"""

    def __init__(self, storage: StorageInterface):
        self._storage = storage
        self._sequence = SequenceAllocator(storage, USERS_PREFIX)

    def _path(self, user_id: int) -> str:
        return f"{USERS_PREFIX}/{user_id}.json"

    async def create(self, username: str, role: str = ROLE_MEMBER) -> Dict[str, Any]:
        user_id = await self._sequence.next_id()
        user = {
            "id": user_id,
            "username": username,
            "role": role,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        await self._storage.save_json(user, self._path(user_id))
        logger.info(f"Created user {user_id} ({username})")
        return user

    async def get(self, user_id: Any) -> Optional[Dict[str, Any]]:
        normalized = coerce_id(user_id)
        if normalized is None:
            return None
        try:
            return await self._storage.get_json(self._path(normalized))
        except FileNotFoundError:
            return None

    async def find_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        for path in await self._storage.list_files(USERS_PREFIX):
            user = await self._storage.get_json(path)
            if user["username"] == username:
                return user
        return None

    async def username_taken(self, username: str) -> bool:
        return await self.find_by_username(username) is not None
