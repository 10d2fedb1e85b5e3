import logging
import os
import threading
import uuid
from typing import Any, Dict, Mapping, Optional

from fastapi import APIRouter, Depends, Header
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from fastapi_cache.backends import Backend
from fastapi_cache.backends.inmemory import InMemoryBackend

from src.commands.executor.command_executor import CommandExecutor
from src.commands.interfaces.command_context import CommandContext
from src.commands.pipeline.default_pipeline import build_default_pipeline
from src.commands.registry.command_registry import CommandRegistry
from src.config.access_policy_loader import AccessPolicyLoader
from src.config.constants import (
    CACHE_NAMESPACE,
    DEFAULT_ACCESS_POLICY_PATH,
    DEFAULT_CACHE_EXPIRE_SECONDS,
    ROLE_ADMIN,
    STORAGE_BASE_URL,
)
from src.core.auth.token_registry import Identity, TokenRegistry
from src.core.storage.interface import StorageInterface
from src.core.storage.memory import MemoryStorage
from src.repositories.goal_repository import GoalRepository
from src.repositories.user_repository import UserRepository
from src.models.requests import (
    AttachGoalImageRequest,
    CreateGoalRequest,
    SignUpRequest,
    UpdateGoalRequest,
)
from src.models.responses import (
    ERROR_RESPONSES,
    GoalListResponse,
    GoalResponse,
    HealthCheckResponse,
    SignUpResponse,
)

logger = logging.getLogger(__name__)

# Initialize router
router = APIRouter(
    prefix="/goal-tracker",
    tags=["Goal Tracker"],
    responses=ERROR_RESPONSES,
)

_executor: Optional[CommandExecutor] = None
_executor_lock = threading.Lock()


def build_command_executor(
    storage: Optional[StorageInterface] = None,
    policy_loader: Optional[AccessPolicyLoader] = None,
    token_registry: Optional[TokenRegistry] = None,
    cache_backend: Optional[Backend] = None,
) -> CommandExecutor:
    """
    Wire repositories, token registry, policies and cache into an executor.

    Unset collaborators are created from environment configuration:
    STORAGE_BASE_URL, ACCESS_POLICY_PATH, CACHE_EXPIRE_SECONDS and
    ADMIN_BOOTSTRAP_TOKEN.
    """
    if storage is None:
        storage = MemoryStorage(
            base_url=os.environ.get("STORAGE_BASE_URL", STORAGE_BASE_URL)
        )

    if policy_loader is None:
        policy_loader = AccessPolicyLoader.get_instance(
            os.environ.get("ACCESS_POLICY_PATH", DEFAULT_ACCESS_POLICY_PATH)
        )

    if token_registry is None:
        token_registry = TokenRegistry()
        admin_token = os.environ.get("ADMIN_BOOTSTRAP_TOKEN")
        if admin_token:
            token_registry.register(admin_token, Identity(user_id=0, role=ROLE_ADMIN))
            logger.info("Registered bootstrap admin token")

    if cache_backend is None:
        cache_backend = InMemoryBackend()

    cache_expire_seconds = int(
        os.environ.get("CACHE_EXPIRE_SECONDS", DEFAULT_CACHE_EXPIRE_SECONDS)
    )

    registry = CommandRegistry(
        goal_repository=GoalRepository(storage),
        user_repository=UserRepository(storage),
        token_registry=token_registry,
        policy_loader=policy_loader,
    )

    # The in-memory backend store is shared per process, so scope the
    # namespace to this executor
    pipeline = build_default_pipeline(
        policy_loader,
        cache_backend=cache_backend,
        cache_namespace=f"{CACHE_NAMESPACE}:{uuid.uuid4().hex}",
        cache_expire_seconds=cache_expire_seconds,
    )

    return CommandExecutor(registry, pipeline)


# Dependency functions
def get_command_executor() -> CommandExecutor:
    """Get the process-wide command executor, building it on first use"""
    global _executor
    if _executor is None:
        with _executor_lock:
            if _executor is None:
                _executor = build_command_executor()
    return _executor


def get_auth_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Extract the bearer token from the Authorization header"""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    # Malformed headers still count as a presented (invalid) credential
    return authorization.strip()


def to_http_response(context: CommandContext) -> Response:
    """Convert the pipeline response on a context into an HTTP response"""
    pipeline_response = context.response
    headers = {"X-Request-ID": context.request_id}

    if pipeline_response.body is None:
        return Response(status_code=pipeline_response.status_code, headers=headers)

    return JSONResponse(
        status_code=pipeline_response.status_code,
        content=jsonable_encoder(pipeline_response.body),
        headers=headers,
    )


async def run_command(
    executor: CommandExecutor,
    command_name: str,
    fields: Optional[Mapping[str, Any]] = None,
    auth_token: Optional[str] = None,
) -> Response:
    context, _ = await executor.execute_command(command_name, fields, auth_token=auth_token)
    return to_http_response(context)


@router.get("/healthz", response_model=HealthCheckResponse, tags=["Health"])
async def health_check(
    executor: CommandExecutor = Depends(get_command_executor),
) -> Response:
    """Report the health of the goal tracker's collaborators"""
    return await run_command(executor, "health_check")


@router.post("/users", response_model=SignUpResponse, tags=["Users"])
async def sign_up(
    request: Optional[SignUpRequest] = None,
    executor: CommandExecutor = Depends(get_command_executor),
) -> Response:
    """Register a user and return a login token"""
    fields: Dict[str, Any] = request.model_dump(exclude_none=True) if request else {}
    return await run_command(executor, "sign_up", fields)


@router.get("/goals", response_model=GoalListResponse, tags=["Goals"])
async def list_goals(
    executor: CommandExecutor = Depends(get_command_executor),
    auth_token: Optional[str] = Depends(get_auth_token),
) -> Response:
    """List the caller's goals"""
    return await run_command(executor, "list_goals", auth_token=auth_token)


@router.post("/goals", response_model=GoalResponse, tags=["Goals"])
async def create_goal(
    request: Optional[CreateGoalRequest] = None,
    executor: CommandExecutor = Depends(get_command_executor),
    auth_token: Optional[str] = Depends(get_auth_token),
) -> Response:
    """Create a goal owned by the caller"""
    fields = request.model_dump(exclude_none=True) if request else {}
    return await run_command(executor, "create_goal", fields, auth_token)


@router.get("/goals/{goal_id}", response_model=GoalResponse, tags=["Goals"])
async def view_goal(
    goal_id: str,
    executor: CommandExecutor = Depends(get_command_executor),
    auth_token: Optional[str] = Depends(get_auth_token),
) -> Response:
    """View one of the caller's goals"""
    return await run_command(executor, "view_goal", {"id": goal_id}, auth_token)


@router.patch("/goals/{goal_id}", response_model=GoalResponse, tags=["Goals"])
async def update_goal(
    goal_id: str,
    request: Optional[UpdateGoalRequest] = None,
    executor: CommandExecutor = Depends(get_command_executor),
    auth_token: Optional[str] = Depends(get_auth_token),
) -> Response:
    """Change a goal's title, description or url"""
    fields: Dict[str, Any] = request.model_dump(exclude_unset=True) if request else {}
    fields["id"] = goal_id
    return await run_command(executor, "update_goal", fields, auth_token)


@router.delete(
    "/goals/{goal_id}", status_code=204, response_class=Response, tags=["Goals"]
)
async def delete_goal(
    goal_id: str,
    executor: CommandExecutor = Depends(get_command_executor),
    auth_token: Optional[str] = Depends(get_auth_token),
) -> Response:
    """Delete a goal; responds 204 No Content on success"""
    return await run_command(executor, "delete_goal", {"id": goal_id}, auth_token)


@router.put("/goals/{goal_id}/image", response_model=GoalResponse, tags=["Goals"])
async def attach_goal_image(
    goal_id: str,
    request: Optional[AttachGoalImageRequest] = None,
    executor: CommandExecutor = Depends(get_command_executor),
    auth_token: Optional[str] = Depends(get_auth_token),
) -> Response:
    """Attach an image to a goal"""
    fields: Dict[str, Any] = request.model_dump(exclude_none=True) if request else {}
    fields["id"] = goal_id
    return await run_command(executor, "attach_goal_image", fields, auth_token)


@router.get("/admin/goals", response_model=GoalListResponse, tags=["Admin"])
async def list_all_goals(
    executor: CommandExecutor = Depends(get_command_executor),
    auth_token: Optional[str] = Depends(get_auth_token),
) -> Response:
    """List every goal (admin credential required)"""
    return await run_command(executor, "list_all_goals", auth_token=auth_token)
