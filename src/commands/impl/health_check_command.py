import time
import logging

from src.commands.interfaces.command import Command
from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult

logger = logging.getLogger(__name__)


class HealthCheckCommand(Command):
    """
    Simple health check command that reports on the injected collaborators.

    Public and side-effect free, so it doubles as a smoke test of the
    whole pipeline.
    """

    def get_command_name(self) -> str:
        return "health_check"

    async def execute(self, context: CommandContext) -> CommandResult:
        """Execute health check workflow"""
        start_time = time.time()

        logger.info(f"Starting health check for request {context.request_id}")

        health_status = await self._check_system_health(context)

        execution_time = (time.time() - start_time) * 1000
        logger.info(
            f"Health check completed for request {context.request_id} in {execution_time:.2f}ms"
        )

        return CommandResult.success(
            request_id=context.request_id,
            command_name=self.get_command_name(),
            execution_time_ms=execution_time,
            data=health_status,
        )

    async def _check_system_health(self, context: CommandContext) -> dict:
        """Perform basic system health checks"""
        checks = {}

        try:
            goals = await context.goal_repository.list_all()
            checks["goal_repository"] = {"status": "healthy", "goals": len(goals)}
        except Exception as e:
            logger.warning(f"Goal repository health check failed: {e}")
            checks["goal_repository"] = {"status": "unhealthy", "error": str(e)}

        try:
            checks["token_registry"] = {
                "status": "healthy",
                "issued_tokens": len(context.token_registry),
            }
        except Exception as e:
            logger.warning(f"Token registry health check failed: {e}")
            checks["token_registry"] = {"status": "unhealthy", "error": str(e)}

        unhealthy_count = sum(
            1 for check in checks.values() if check.get("status") == "unhealthy"
        )
        overall_status = "healthy" if unhealthy_count == 0 else "unhealthy"

        return {
            "overall_status": overall_status,
            "timestamp": time.time(),
            "checks": checks,
            "unhealthy_components": unhealthy_count,
        }
