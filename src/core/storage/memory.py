import json
import time
from typing import Dict, Any, List
from src.core.storage.interface import StorageInterface
import obstore as obs
from obstore.store import MemoryStore


class MemoryStorage(StorageInterface):
    """
    In-memory implementation of StorageInterface backed by an obstore MemoryStore.

    Records live for the lifetime of the process only.
    """

    def __init__(self, base_url: str = "memory://"):
        """
        Initialize in-memory storage

        Args:
            base_url: Base URL prefix for virtual URLs
        """
        self._store = MemoryStore()
        self._base_url: str = base_url
        self._metadata: Dict[str, Dict[str, Any]] = {}

    @property
    def base_url(self) -> str:
        """Get the base URL"""
        return self._base_url

    async def save_bytes(self, data: bytes, path: str) -> str:
        """
        Save binary data to in-memory storage

        Args:
            data: Binary data to store
            path: Storage path
        """
        await obs.put_async(self._store, path, data)

        self._metadata[path] = {"timestamp": time.time(), "size": len(data)}

        return self.get_url(path)

    async def get_bytes(self, path: str) -> bytes:
        """Get binary data from in-memory storage"""
        try:
            result = await obs.get_async(self._store, path)
            return bytes(await result.bytes_async())
        except Exception:
            raise FileNotFoundError(f"Path not found in memory storage: {path}")

    async def save_json(self, data: Dict[str, Any], path: str) -> str:
        """Save JSON data to in-memory storage"""
        json_str = json.dumps(data)
        return await self.save_bytes(json_str.encode("utf-8"), path)

    async def get_json(self, path: str) -> Dict[str, Any]:
        """Get JSON data from in-memory storage"""
        data = await self.get_bytes(path)
        return json.loads(data.decode("utf-8"))

    async def list_files(self, prefix: str) -> List[str]:
        """List files in in-memory storage with given prefix"""
        objects = obs.list(self._store, prefix=prefix)
        return [obj["path"] for obj in await objects.collect_async()]

    async def delete(self, path: str) -> bool:
        """Delete an object from in-memory storage"""
        if path not in self._metadata:
            return False
        await obs.delete_async(self._store, path)
        del self._metadata[path]
        return True

    def get_url(self, path: str) -> str:
        """Get URL for a stored object (virtual URL for in-memory storage)"""
        return f"{self._base_url}/{path}"

    def get_object_count(self) -> int:
        """Number of objects currently stored"""
        return len(self._metadata)
