from abc import ABC, abstractmethod
from typing import Dict, Any, List


class StorageInterface(ABC):
    """Abstract interface for record storage operations"""

    @abstractmethod
    async def save_bytes(self, data: bytes, path: str) -> str:
        """
        Save binary data to storage and return access URL

        Args:
            data: Binary data to save
            path: Storage path (e.g., "goals/42.json")

        Returns:
            URL to access the saved data
        """
        pass

    @abstractmethod
    async def get_bytes(self, path: str) -> bytes:
        """
        Get binary data from storage

        Args:
            path: Storage path to retrieve

        Returns:
            Binary data

        Raises:
            FileNotFoundError: If nothing is stored at path
        """
        pass

    @abstractmethod
    async def save_json(self, data: Dict[str, Any], path: str) -> str:
        """
        Save JSON data to storage and return access URL

        Args:
            data: JSON data to save
            path: Storage path

        Returns:
            URL to access the saved JSON
        """
        pass

    @abstractmethod
    async def get_json(self, path: str) -> Dict[str, Any]:
        """
        Get JSON data from storage

        Args:
            path: Storage path to retrieve

        Returns:
            JSON data as dictionary
        """
        pass

    @abstractmethod
    async def list_files(self, prefix: str) -> List[str]:
        """
        List files in storage with given prefix

        Args:
            prefix: Path prefix to list

        Returns:
            List of file paths
        """
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete a stored object

        Args:
            path: Storage path to delete

        Returns:
            True if an object was deleted, False if nothing was stored at path
        """
        pass

    @abstractmethod
    def get_url(self, path: str) -> str:
        """
        Get URL for a stored object

        Args:
            path: Storage path

        Returns:
            URL for accessing the object
        """
        pass

    async def exists(self, path: str) -> bool:
        """Check whether an object is stored at path"""
        try:
            await self.get_bytes(path)
            return True
        except FileNotFoundError:
            return False
