"""
Goal records stored as JSON documents.

Each goal lives at ``goals/<id>.json`` in the configured storage. Ids are
allocated from a counter document so they stay stable integers.
"""

import asyncio
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from src.config.constants import GOALS_PREFIX, SEQUENCES_PREFIX
from src.core.storage.interface import StorageInterface

logger = logging.getLogger(__name__)

# ASCII digits only; str.isdigit() also accepts superscripts int() rejects
INTEGER_PATTERN = re.compile(r"-?[0-9]+")
MAX_ID_DIGITS = 20


def coerce_id(value: Any) -> Optional[int]:
    """Convert a raw id field to an int, or None if it is not an integer"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if len(text) > MAX_ID_DIGITS or not INTEGER_PATTERN.fullmatch(text):
        return None
    return int(text)


class SequenceAllocator:
    """Allocates increasing integer ids from a counter stored in storage"""

    def __init__(self, storage: StorageInterface, name: str):
        self._storage = storage
        self._path = f"{SEQUENCES_PREFIX}/{name}.json"
        self._lock = asyncio.Lock()

    async def next_id(self) -> int:
        async with self._lock:
            try:
                current = (await self._storage.get_json(self._path))["value"]
            except FileNotFoundError:
                current = 0
            next_value = current + 1
            await self._storage.save_json({"value": next_value}, self._path)
            return next_value


class GoalRepository:
    """Create, read, update and delete goal records"""

    def __init__(self, storage: StorageInterface):
        self._storage = storage
        self._sequence = SequenceAllocator(storage, GOALS_PREFIX)

    def _path(self, goal_id: int) -> str:
        return f"{GOALS_PREFIX}/{goal_id}.json"

    async def create(
        self,
        owner_id: int,
        title: str,
        description: Optional[str] = None,
        url: Optional[str] = None,
    ) -> Dict[str, Any]:
        goal_id = await self._sequence.next_id()
        now = datetime.now(timezone.utc).isoformat()
        goal = {
            "id": goal_id,
            "owner_id": owner_id,
            "title": title,
            "description": description,
            "url": url,
            "image_url": None,
            "image_content_type": None,
            "created_at": now,
            "updated_at": now,
        }
        await self._storage.save_json(goal, self._path(goal_id))
        logger.info(f"Created goal {goal_id} for user {owner_id}")
        return goal

    async def get(self, goal_id: Any) -> Optional[Dict[str, Any]]:
        normalized = coerce_id(goal_id)
        if normalized is None:
            return None
        try:
            return await self._storage.get_json(self._path(normalized))
        except FileNotFoundError:
            return None

    async def exists(self, goal_id: Any) -> bool:
        normalized = coerce_id(goal_id)
        if normalized is None:
            return False
        return await self._storage.exists(self._path(normalized))

    async def update(self, goal_id: Any, changes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply changes to an existing goal.

        Raises:
            KeyError: If the goal does not exist
        """
        goal = await self.get(goal_id)
        if goal is None:
            raise KeyError(f"Goal {goal_id} not found")

        goal.update(changes)
        goal["updated_at"] = datetime.now(timezone.utc).isoformat()
        await self._storage.save_json(goal, self._path(goal["id"]))
        logger.info(f"Updated goal {goal['id']}: {sorted(changes.keys())}")
        return goal

    async def delete(self, goal_id: Any) -> bool:
        normalized = coerce_id(goal_id)
        if normalized is None:
            return False
        deleted = await self._storage.delete(self._path(normalized))
        if deleted:
            logger.info(f"Deleted goal {normalized}")
        return deleted

    async def list_all(self) -> List[Dict[str, Any]]:
        paths = await self._storage.list_files(GOALS_PREFIX)
        goals = [await self._storage.get_json(path) for path in paths]
        return sorted(goals, key=lambda goal: goal["id"])

    async def list_for_owner(self, owner_id: int) -> List[Dict[str, Any]]:
        return [goal for goal in await self.list_all() if goal["owner_id"] == owner_id]

    async def title_taken(
        self, owner_id: int, title: str, exclude_id: Optional[int] = None
    ) -> bool:
        """Whether the owner already has a goal with this title (case-insensitive)"""
        wanted = title.strip().lower()
        for goal in await self.list_for_owner(owner_id):
            if goal["id"] == exclude_id:
                continue
            if goal["title"].strip().lower() == wanted:
                return True
        return False
