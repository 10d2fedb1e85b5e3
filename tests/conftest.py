import json
import uuid
from typing import Any, Dict

import pytest
from fastapi_cache.backends.inmemory import InMemoryBackend

from src.commands.executor.command_executor import CommandExecutor
from src.commands.registry.command_registry import CommandRegistry
from src.config.access_policy_loader import AccessPolicyLoader
from src.config.constants import DEFAULT_ACCESS_POLICY_PATH, ROLE_ADMIN
from src.core.auth.token_registry import Identity, TokenRegistry
from src.core.storage.interface import StorageInterface
from src.core.storage.memory import MemoryStorage
from src.repositories.goal_repository import GoalRepository
from src.repositories.user_repository import UserRepository
from src.routers.goals import build_command_executor

ADMIN_TOKEN = "test-admin-token"


@pytest.fixture
def memory_storage() -> StorageInterface:
    """Fixture for memory storage"""
    return MemoryStorage(base_url="memory://test")


@pytest.fixture
async def memory_storage_with_file(
    memory_storage: StorageInterface,
) -> tuple[StorageInterface, str]:
    """Fixture for memory storage with a test file"""
    test_content = b"This is test content"
    test_path = "test/test_file.txt"
    await memory_storage.save_bytes(test_content, test_path)
    return memory_storage, test_path


@pytest.fixture
def token_registry() -> TokenRegistry:
    registry = TokenRegistry()
    registry.register(ADMIN_TOKEN, Identity(user_id=0, role=ROLE_ADMIN))
    return registry


@pytest.fixture
def admin_token() -> str:
    """Bootstrap admin token registered in token_registry"""
    return ADMIN_TOKEN


@pytest.fixture
def policy_loader() -> AccessPolicyLoader:
    """Loader for the project's real access policy table"""
    return AccessPolicyLoader(DEFAULT_ACCESS_POLICY_PATH)


@pytest.fixture
def goal_repository(memory_storage: StorageInterface) -> GoalRepository:
    return GoalRepository(memory_storage)


@pytest.fixture
def user_repository(memory_storage: StorageInterface) -> UserRepository:
    return UserRepository(memory_storage)


@pytest.fixture
def command_registry(
    goal_repository: GoalRepository,
    user_repository: UserRepository,
    token_registry: TokenRegistry,
    policy_loader: AccessPolicyLoader,
) -> CommandRegistry:
    return CommandRegistry(goal_repository, user_repository, token_registry, policy_loader)


@pytest.fixture
def executor(
    memory_storage: StorageInterface,
    policy_loader: AccessPolicyLoader,
    token_registry: TokenRegistry,
) -> CommandExecutor:
    """Fully wired executor with the default pipeline"""
    return build_command_executor(
        storage=memory_storage,
        policy_loader=policy_loader,
        token_registry=token_registry,
        cache_backend=InMemoryBackend(),
    )


@pytest.fixture
async def member(executor: CommandExecutor) -> Dict[str, Any]:
    """A signed-up member: {user_id, username, role, token}"""
    _, result = await executor.execute_command("sign_up", {"username": "alice"})
    assert result.is_success()
    return result.data


@pytest.fixture
async def other_member(executor: CommandExecutor) -> Dict[str, Any]:
    _, result = await executor.execute_command("sign_up", {"username": "bob"})
    assert result.is_success()
    return result.data


@pytest.fixture
def unique_test_id() -> str:
    """Generate a unique test identifier for test isolation"""
    return str(uuid.uuid4())


@pytest.fixture
def access_policy_file(tmp_path) -> str:
    """Small policy table written to a temporary file"""
    data = {
        "policies": [
            {"command": "public_cmd", "required_credential": None},
            {"command": "login_cmd", "required_credential": "login"},
            {
                "command": "owned_cmd",
                "required_credential": "login",
                "requires_ownership": True,
            },
            {"command": "admin_cmd", "required_credential": "admin"},
        ]
    }
    path = tmp_path / "access_policies.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)
