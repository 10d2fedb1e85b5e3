import time
from typing import Any, Dict, Mapping, Optional, Tuple
import logging
from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult
from src.commands.pipeline.pipeline import Pipeline
from src.commands.pipeline.responses import render_result
from src.commands.registry.command_registry import CommandRegistry


logger = logging.getLogger(__name__)


class CommandExecutor:
    """
    Runs named commands through a pipeline and keeps execution metrics.

    Each call builds a fresh context from the raw fields, runs it once
    through the pipeline and guarantees the context carries a response.
    There are no retries and no timeouts at this layer: a failure aborts
    the request and the pipeline's error translation decides the response.
    """

    def __init__(self, command_registry: CommandRegistry, pipeline: Pipeline):
        """
        Initialize command executor.

        Args:
            command_registry: Registry for creating command contexts
            pipeline: Handler chain every command runs through
        """
        logger.info(f"Initializing CommandExecutor with {pipeline!r}")

        self._command_registry = command_registry
        self._pipeline = pipeline

        # Track execution metrics
        self._execution_count = 0
        self._success_count = 0
        self._failure_count = 0
        self._total_execution_time = 0.0

    @property
    def pipeline(self) -> Pipeline:
        return self._pipeline

    @property
    def command_registry(self) -> CommandRegistry:
        return self._command_registry

    async def execute_command(
        self,
        command_name: str,
        raw_fields: Optional[Mapping[str, Any]] = None,
        auth_token: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> Tuple[CommandContext, CommandResult]:
        """
        Execute a single command.

        Args:
            command_name: Name of the command to execute
            raw_fields: Input fields from the transport
            auth_token: Credential presented by the caller
            request_id: Optional request identifier for logs

        Returns:
            The context (with its response set) and the pipeline result

        Raises:
            ValueError: When command_name is not registered
        """
        start_time = time.time()

        try:
            context = self._command_registry.create_context(
                command_name, raw_fields, auth_token=auth_token, request_id=request_id
            )
        except (ValueError, TypeError) as e:
            logger.error(f"Failed to create command '{command_name}': {e}")
            raise

        self._execution_count += 1
        logger.info(
            f"Starting execution of command '{command_name}' for request {context.request_id}"
        )

        context, result = await self._pipeline.run(context)

        if context.response is None:
            # Pipelines without a rendering/translation handler
            context.response = render_result(result)

        execution_time = (time.time() - start_time) * 1000
        self._total_execution_time += execution_time

        if result.is_success():
            self._success_count += 1
            logger.info(
                f"Command '{command_name}' completed successfully for request "
                f"{context.request_id} in {execution_time:.2f}ms"
            )
        else:
            self._failure_count += 1
            logger.warning(
                f"Command '{command_name}' failed for request {context.request_id} "
                f"({result.error_category.value if result.error_category else 'unknown'}) "
                f"in {execution_time:.2f}ms"
            )

        return context, result

    def get_execution_metrics(self) -> Dict[str, Any]:
        """
        Get execution metrics for monitoring and debugging.

        Returns:
            Dictionary containing execution statistics
        """
        avg_execution_time = (
            self._total_execution_time / self._execution_count
            if self._execution_count > 0
            else 0
        )

        success_rate = (
            (self._success_count / self._execution_count) * 100
            if self._execution_count > 0
            else 0
        )

        return {
            "total_executions": self._execution_count,
            "successful_executions": self._success_count,
            "failed_executions": self._failure_count,
            "success_rate_percent": round(success_rate, 2),
            "average_execution_time_ms": round(avg_execution_time, 2),
            "total_execution_time_ms": round(self._total_execution_time, 2),
            "pipeline": self._pipeline.describe(),
        }

    def reset_metrics(self) -> None:
        """Reset execution metrics (useful for testing)"""
        self._execution_count = 0
        self._success_count = 0
        self._failure_count = 0
        self._total_execution_time = 0.0
        logger.info("Execution metrics reset")
