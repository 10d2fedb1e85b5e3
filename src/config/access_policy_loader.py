"""
Access policy loader for command authorization rules.

This module provides an AccessPolicyLoader class that loads the per-command
authorization rules table from a JSON file and caches it in memory behind a
lock, so concurrent requests share a single parsed copy.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

from src.config.access_policies import AccessPolicy
from src.config.constants import CREDENTIAL_CATEGORIES, DEFAULT_ACCESS_POLICY_PATH

logger = logging.getLogger(__name__)


class AccessPolicyConfig:
    """Configuration model for access policies loaded from JSON."""

    def __init__(self, policies: List[Dict]) -> None:
        """
        Initialize configuration with policy data.

        Args:
            policies: List of policy configuration dictionaries
        """
        self.policies = policies

    @classmethod
    def load_from_file(
        cls, filepath: str = DEFAULT_ACCESS_POLICY_PATH
    ) -> "AccessPolicyConfig":
        """
        Load configuration from a JSON file.

        Args:
            filepath: Path to the access policies JSON file

        Returns:
            AccessPolicyConfig instance with loaded data

        Raises:
            FileNotFoundError: If the configuration file is not found
            json.JSONDecodeError: If the JSON is malformed
            ValueError: If the configuration structure is invalid
        """
        file_path = Path(filepath)

        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file {filepath} not found.")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)

            if not isinstance(data, dict):
                raise ValueError("Configuration file must contain a JSON object")

            if "policies" not in data:
                raise ValueError("Configuration file must contain 'policies' array")

            policies = data["policies"]
            if not isinstance(policies, list):
                raise ValueError("'policies' must be an array")

            seen = set()
            for i, policy in enumerate(policies):
                if not isinstance(policy, dict):
                    raise ValueError(f"Policy at index {i} must be an object")

                if "command" not in policy:
                    raise ValueError(f"Policy at index {i} missing required field: command")

                command = policy["command"]
                if not isinstance(command, str) or not command.strip():
                    raise ValueError(f"Policy at index {i} has invalid 'command' field")

                if command in seen:
                    raise ValueError(f"Duplicate policy for command '{command}'")
                seen.add(command)

                credential = policy.get("required_credential")
                if credential is not None and credential not in CREDENTIAL_CATEGORIES:
                    raise ValueError(
                        f"Policy for '{command}' has unknown credential category "
                        f"'{credential}'. Expected one of {list(CREDENTIAL_CATEGORIES)}"
                    )

                if not isinstance(policy.get("requires_ownership", False), bool):
                    raise ValueError(
                        f"Policy for '{command}' has non-boolean 'requires_ownership'"
                    )

            logger.info(
                f"Successfully loaded {len(policies)} access policies from {filepath}"
            )
            return cls(policies=policies)

        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in configuration file {filepath}: {str(e)}")
            raise
        except Exception as e:
            logger.error(f"Failed to load configuration from {filepath}: {str(e)}")
            raise

    def get_policies(self) -> List[Dict]:
        return self.policies


class AccessPolicyLoader:
    """
    Thread-safe loader for command access policies.

    Parsed policies are cached on first access. Use get_instance() for the
    process-wide loader or construct one directly with a custom path.
    """

    _instance: Optional["AccessPolicyLoader"] = None
    _lock = threading.Lock()

    def __init__(self, config_path: str = DEFAULT_ACCESS_POLICY_PATH) -> None:
        """
        Initialize the access policy loader.

        Args:
            config_path: Path to the access policies configuration file
        """
        self._config_path = config_path
        self._policies_cache: Optional[Dict[str, AccessPolicy]] = None
        self._cache_lock = threading.Lock()

        logger.debug(f"AccessPolicyLoader initialized with config path: {config_path}")

    @classmethod
    def get_instance(
        cls, config_path: str = DEFAULT_ACCESS_POLICY_PATH
    ) -> "AccessPolicyLoader":
        """
        Get singleton instance of AccessPolicyLoader.

        Args:
            config_path: Path to the access policies configuration file

        Returns:
            AccessPolicyLoader singleton instance
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls(config_path)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the singleton (used by tests)"""
        with cls._lock:
            cls._instance = None

    def _load_policies(self) -> Dict[str, AccessPolicy]:
        config = AccessPolicyConfig.load_from_file(self._config_path)
        policies = {}

        for entry in config.get_policies():
            policy = AccessPolicy(
                command_name=entry["command"],
                required_credential=entry.get("required_credential"),
                requires_ownership=entry.get("requires_ownership", False),
            )
            policies[policy.command_name] = policy
            logger.debug(f"Loaded access policy for command: {policy.command_name}")

        return policies

    def _get_policies_cache(self) -> Dict[str, AccessPolicy]:
        if self._policies_cache is None:
            with self._cache_lock:
                if self._policies_cache is None:
                    self._policies_cache = self._load_policies()
        return self._policies_cache

    def get_policy(self, command_name: str) -> Optional[AccessPolicy]:
        """
        Get the access policy registered for a command.

        Args:
            command_name: Name of the command

        Returns:
            AccessPolicy, or None if the command has no registered policy
        """
        policy = self._get_policies_cache().get(command_name)
        if policy is None:
            logger.warning(f"No access policy registered for command '{command_name}'")
        return policy

    def has_policy(self, command_name: str) -> bool:
        if not command_name or not isinstance(command_name, str):
            return False
        return command_name in self._get_policies_cache()

    def list_commands(self) -> List[str]:
        return list(self._get_policies_cache().keys())

    def reload_policies(self) -> None:
        """
        Force reload of policies from the configuration file.

        The cache is cleared and repopulated on next access.
        """
        with self._cache_lock:
            self._policies_cache = None
            logger.info("Access policy cache cleared, will reload on next access")
