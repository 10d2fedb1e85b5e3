from typing import Any, Dict, List, Mapping, Optional, Type
import logging
import uuid
from src.commands.interfaces.command import Command
from src.commands.interfaces.command_context import CommandContext
from src.config.access_policy_loader import AccessPolicyLoader
from src.core.auth.token_registry import TokenRegistry
from src.repositories.goal_repository import GoalRepository
from src.repositories.user_repository import UserRepository


logger = logging.getLogger(__name__)


class CommandRegistry:
    """
    Registry of command classes and factory for per-request contexts.

    The CommandRegistry owns the collaborators every command needs and
    injects them into each CommandContext it builds, so commands never have
    to know how repositories or the token registry are obtained.

    Usage:
        registry = CommandRegistry(goal_repository, user_repository, token_registry, policies)
        context = registry.create_context("delete_goal", {"id": 42}, auth_token)
        context, result = await pipeline.run(context)
    """

    def __init__(
        self,
        goal_repository: GoalRepository,
        user_repository: UserRepository,
        token_registry: TokenRegistry,
        policy_loader: AccessPolicyLoader,
        register_defaults: bool = True,
    ):
        """
        Initialize command registry with required dependencies.

        Args:
            goal_repository: Storage of goal records
            user_repository: Storage of user records
            token_registry: Issuer/resolver of authentication tokens
            policy_loader: Access policies, used to verify registered commands
            register_defaults: Register the built-in goal tracker commands
        """
        logger.info("Initializing CommandRegistry")

        self._goal_repository = goal_repository
        self._user_repository = user_repository
        self._token_registry = token_registry
        self._policy_loader = policy_loader

        # Registry of command classes keyed by command name
        self._command_classes: Dict[str, Type[Command]] = {}

        if register_defaults:
            self._setup_commands()

    def _setup_commands(self) -> None:
        """Register all built-in command classes"""
        # Imported here to avoid circular dependencies
        from src.commands.impl import ALL_COMMANDS

        for command_class in ALL_COMMANDS:
            self._register_command_class(command_class)

        logger.info(
            f"Registered {len(self._command_classes)} command classes: "
            f"{list(self._command_classes.keys())}"
        )

    def _register_command_class(self, command_class: Type[Command]) -> str:
        """Register a command class in the registry"""
        # Create temporary instance to get command name
        command_name = command_class().get_command_name()

        if command_name in self._command_classes:
            logger.warning(f"Command '{command_name}' already registered, overriding")

        if not self._policy_loader.has_policy(command_name):
            logger.warning(
                f"Command '{command_name}' has no access policy and will always be forbidden"
            )

        self._command_classes[command_name] = command_class
        logger.debug(f"Registered command class: {command_name}")
        return command_name

    def create_command(self, command_name: str) -> Command:
        """
        Create a fresh command instance.

        Raises:
            ValueError: If command_name is not registered
        """
        if command_name not in self._command_classes:
            available_commands = list(self._command_classes.keys())
            raise ValueError(
                f"Command '{command_name}' not found. Available commands: {available_commands}"
            )
        return self._command_classes[command_name]()

    def create_context(
        self,
        command_name: str,
        raw_fields: Optional[Mapping[str, Any]] = None,
        auth_token: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> CommandContext:
        """
        Build a context for one request, bound to a new command instance.

        Only the fields the command declares are kept.

        Args:
            command_name: Name of the command to run
            raw_fields: Field mapping delivered by the transport
            auth_token: Credential presented by the caller, if any
            request_id: Identifier for logs; generated when omitted

        Raises:
            ValueError: If command_name is not registered
            TypeError: If raw_fields is not a mapping
        """
        if raw_fields is not None and not isinstance(raw_fields, Mapping):
            raise TypeError("raw_fields must be a mapping")

        command = self.create_command(command_name)

        context = CommandContext.from_fields(
            raw_fields,
            command.get_field_names(),
            request_id=request_id or str(uuid.uuid4()),
            command_name=command_name,
            goal_repository=self._goal_repository,
            user_repository=self._user_repository,
            token_registry=self._token_registry,
            command=command,
            auth_token=auth_token,
        )

        logger.debug(f"Created context for command '{command_name}' ({context.request_id})")
        return context

    def get_available_commands(self) -> List[str]:
        """
        Get list of all registered command names.

        Returns:
            List of available command names
        """
        return list(self._command_classes.keys())

    def get_command_info(self, command_name: str) -> Dict[str, Any]:
        """
        Get information about a specific command.

        Args:
            command_name: Name of the command

        Returns:
            Dictionary containing command information

        Raises:
            ValueError: If command_name is not registered
        """
        if command_name not in self._command_classes:
            raise ValueError(f"Command '{command_name}' not found")

        command_class = self._command_classes[command_name]
        temp_instance = command_class()
        policy = self._policy_loader.get_policy(command_name)

        return {
            "name": command_name,
            "class": command_class.__name__,
            "fields": list(temp_instance.get_field_names()),
            "rules": [repr(rule) for rule in temp_instance.get_validation_rules()],
            "cacheable": temp_instance.is_cacheable(),
            "required_credential": policy.required_credential if policy else None,
            "requires_ownership": policy.requires_ownership if policy else False,
            "has_policy": policy is not None,
        }

    def add_command_class(self, command_class: Type[Command]) -> None:
        """
        Add a new command class to the registry at runtime.

        Raises:
            ValueError: If command with same name already exists
        """
        command_name = command_class().get_command_name()

        if command_name in self._command_classes:
            raise ValueError(f"Command '{command_name}' already exists")

        self._register_command_class(command_class)
        logger.info(f"Added new command class: {command_name}")

    def remove_command_class(self, command_name: str) -> bool:
        """
        Remove a command class from the registry.

        Returns:
            True if command was removed, False if not found
        """
        if command_name not in self._command_classes:
            return False

        del self._command_classes[command_name]
        logger.info(f"Removed command class: {command_name}")
        return True
