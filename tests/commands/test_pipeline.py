"""
Tests for Pipeline construction, delegation order and the editing helpers.
"""

from typing import List, Optional

import pytest
from fastapi_cache.backends.inmemory import InMemoryBackend

from src.commands.executor.command_executor import CommandExecutor
from src.commands.interfaces.command import Command
from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult, ErrorCategory
from src.commands.middleware import (
    AuthorizationHandler,
    CachingHandler,
    ErrorTranslationHandler,
    ExecutionHandler,
    OwnershipHandler,
    ResponseRenderingHandler,
    ValidationHandler,
)
from src.commands.pipeline.default_pipeline import build_default_pipeline
from src.commands.pipeline.handler import CallNext, Handler
from src.commands.pipeline.pipeline import Pipeline
from src.commands.registry.command_registry import CommandRegistry
from src.config.access_policy_loader import AccessPolicyLoader


class CountingCommand(Command):
    """Public command that records every execution"""

    executions: List[str] = []

    def get_command_name(self) -> str:
        return "public_cmd"

    async def execute(self, context: CommandContext) -> CommandResult:
        CountingCommand.executions.append(context.request_id)
        return self.build_success(context, {"ok": True})


class OwnedCommand(Command):
    FIELDS = ("owner",)

    def get_command_name(self) -> str:
        return "owned_cmd"

    async def get_resource_owner_id(self, context: CommandContext) -> Optional[int]:
        return context.get_field("owner")

    async def execute(self, context: CommandContext) -> CommandResult:
        return self.build_success(context, None)


class RecordingHandler(Handler):
    def __init__(self, name: str, trace: List[str]):
        super().__init__()
        self.name = name
        self.trace = trace

    async def handle(
        self, context: CommandContext, call_next: Optional[CallNext]
    ) -> CommandResult:
        self.trace.append(f"{self.name}:before")
        result = await call_next(context)
        self.trace.append(f"{self.name}:after")
        return result


class ShortCircuitHandler(Handler):
    async def handle(
        self, context: CommandContext, call_next: Optional[CallNext]
    ) -> CommandResult:
        return self.fail(context, ErrorCategory.FORBIDDEN, "stopped here")


class DoubleDelegatingHandler(Handler):
    async def handle(
        self, context: CommandContext, call_next: Optional[CallNext]
    ) -> CommandResult:
        await call_next(context)
        return await call_next(context)


@pytest.fixture(autouse=True)
def reset_executions():
    CountingCommand.executions = []
    yield
    CountingCommand.executions = []


@pytest.fixture
def scenario_policy_loader(access_policy_file: str) -> AccessPolicyLoader:
    return AccessPolicyLoader(access_policy_file)


@pytest.fixture
def scenario_registry(
    goal_repository, user_repository, token_registry, scenario_policy_loader
) -> CommandRegistry:
    registry = CommandRegistry(
        goal_repository,
        user_repository,
        token_registry,
        scenario_policy_loader,
        register_defaults=False,
    )
    registry.add_command_class(CountingCommand)
    registry.add_command_class(OwnedCommand)
    return registry


class TestPipelineConstruction:
    def test_empty_pipeline_rejected(self) -> None:
        """Test that a pipeline needs handlers"""
        with pytest.raises(ValueError):
            Pipeline([])

    def test_non_handler_rejected(self) -> None:

        """Test that only Handler instances are accepted"""
        with pytest.raises(TypeError):
            Pipeline([object(), ExecutionHandler()])

    def test_terminal_required(self) -> None:

        """A pipeline without a terminal handler fails to build"""
        with pytest.raises(ValueError, match="found 0"):
            Pipeline([ErrorTranslationHandler(), ResponseRenderingHandler()])

    def test_single_terminal(self) -> None:

        """A pipeline with two terminal handlers fails to build"""
        with pytest.raises(ValueError, match="found 2"):
            Pipeline([ExecutionHandler(), ExecutionHandler()])

    def test_terminal_must_be_last(self) -> None:

        """The terminal handler must come last"""
        with pytest.raises(ValueError, match="must be last"):
            Pipeline([ExecutionHandler(), ErrorTranslationHandler()])

    def test_default_order(self, policy_loader: AccessPolicyLoader) -> None:

        """Test the default handler order"""
        pipeline = build_default_pipeline(policy_loader)
        assert pipeline.describe() == [
            "ErrorTranslationHandler",
            "ResponseRenderingHandler",
            "AuthorizationHandler",
            "ValidationHandler",
            "OwnershipHandler",
            "ExecutionHandler",
        ]

    def test_default_order_with_cache(self, policy_loader: AccessPolicyLoader) -> None:

        """Caching sits just before execution when enabled"""
        pipeline = build_default_pipeline(policy_loader, cache_backend=InMemoryBackend())
        assert pipeline.position_of(CachingHandler) == len(pipeline) - 2
        assert pipeline.position_of(OwnershipHandler) < pipeline.position_of(CachingHandler)


class TestPipelineEditing:
    def test_position_of(self, policy_loader: AccessPolicyLoader) -> None:
        """Test handler lookup by type"""
        pipeline = build_default_pipeline(policy_loader)
        assert pipeline.position_of(ErrorTranslationHandler) == 0
        assert pipeline.position_of(ExecutionHandler) == 5
        with pytest.raises(ValueError):
            pipeline.position_of(CachingHandler)

    def test_helpers_return_new_pipelines(self, policy_loader: AccessPolicyLoader) -> None:

        """Editing helpers leave the original pipeline untouched"""
        pipeline = build_default_pipeline(policy_loader)
        trace: List[str] = []

        before = pipeline.insert_before(ValidationHandler, RecordingHandler("r", trace))
        after = pipeline.insert_after(ValidationHandler, RecordingHandler("r", trace))
        without = pipeline.without(OwnershipHandler)
        replaced = pipeline.replace(
            ValidationHandler, RecordingHandler("r", trace)
        )

        assert before.describe()[3] == "RecordingHandler"
        assert after.describe()[4] == "RecordingHandler"
        assert "OwnershipHandler" not in without.describe()
        assert "ValidationHandler" not in replaced.describe()
        assert len(pipeline) == 6

    def test_removing_terminal_fails(self, policy_loader: AccessPolicyLoader) -> None:

        """Removing the terminal handler is rejected"""
        with pytest.raises(ValueError):
            build_default_pipeline(policy_loader).without(ExecutionHandler)

    def test_repr(self) -> None:
        """Test pipeline string representation"""
        pipeline = Pipeline([ResponseRenderingHandler(), ExecutionHandler()])
        assert repr(pipeline) == "Pipeline(ResponseRenderingHandler -> ExecutionHandler)"


class TestPipelineRun:
    @pytest.mark.asyncio
    async def test_depth_first_delegation(self, scenario_registry: CommandRegistry) -> None:
        """Handlers enter in order and leave in reverse"""
        trace: List[str] = []
        pipeline = Pipeline(
            [
                RecordingHandler("outer", trace),
                RecordingHandler("inner", trace),
                ExecutionHandler(),
            ]
        )
        context = scenario_registry.create_context("public_cmd")

        returned, result = await pipeline.run(context)

        assert returned is context
        assert result.is_success()
        assert trace == ["outer:before", "inner:before", "inner:after", "outer:after"]
        assert len(CountingCommand.executions) == 1

    @pytest.mark.asyncio
    async def test_short_circuit_skips_rest_of_chain(self, scenario_registry: CommandRegistry) -> None:
        """A handler that answers itself stops the chain"""
        trace: List[str] = []
        pipeline = Pipeline(
            [
                ErrorTranslationHandler(),
                ShortCircuitHandler(),
                RecordingHandler("never", trace),
                ExecutionHandler(),
            ]
        )
        context = scenario_registry.create_context("public_cmd")

        _, result = await pipeline.run(context)

        assert result.error_category == ErrorCategory.FORBIDDEN
        assert context.response.status_code == 403
        assert trace == []
        assert CountingCommand.executions == []
        assert context.has_result() is False

    @pytest.mark.asyncio
    async def test_delegating_twice_is_an_internal_error(
        self, scenario_registry: CommandRegistry
    ) -> None:
        """Calling the next handler twice gives a 500 and runs the command once"""
        pipeline = Pipeline(
            [
                ErrorTranslationHandler(),
                ResponseRenderingHandler(),
                DoubleDelegatingHandler(),
                ExecutionHandler(),
            ]
        )
        context = scenario_registry.create_context("public_cmd")

        _, result = await pipeline.run(context)

        assert result.error_category == ErrorCategory.UNCLASSIFIED
        assert context.response.status_code == 500
        assert context.response.body["error"] == "internal_error"
        assert len(CountingCommand.executions) == 1

    @pytest.mark.asyncio
    async def test_ownership_before_authorization_still_unauthorized(
        self, scenario_registry: CommandRegistry, scenario_policy_loader: AccessPolicyLoader
    ) -> None:
        """Ownership resolves the caller itself when placed first"""
        pipeline = build_default_pipeline(scenario_policy_loader)
        pipeline = pipeline.without(OwnershipHandler).insert_before(
            AuthorizationHandler, OwnershipHandler(scenario_policy_loader)
        )
        assert pipeline.position_of(OwnershipHandler) < pipeline.position_of(
            AuthorizationHandler
        )
        executor = CommandExecutor(scenario_registry, pipeline)

        context, result = await executor.execute_command("owned_cmd", {"owner": 5})

        assert result.error_category == ErrorCategory.UNAUTHORIZED
        assert context.response.status_code == 401

    @pytest.mark.asyncio
    async def test_owner_mismatch_is_forbidden(
        self, scenario_registry: CommandRegistry, scenario_policy_loader: AccessPolicyLoader, token_registry
    ) -> None:
        """Non-owners are refused, owners and missing owners pass"""
        executor = CommandExecutor(scenario_registry, build_default_pipeline(scenario_policy_loader))
        token = token_registry.issue(7)

        context, _ = await executor.execute_command("owned_cmd", {"owner": 5}, auth_token=token)
        assert context.response.status_code == 403

        context, _ = await executor.execute_command("owned_cmd", {"owner": 7}, auth_token=token)
        assert context.response.status_code == 204

        # Missing resource: nothing to own
        context, _ = await executor.execute_command("owned_cmd", {}, auth_token=token)
        assert context.response.status_code == 204
