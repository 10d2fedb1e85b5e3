import json
from typing import Optional

from fastapi_cache.backends import Backend

from src.commands.interfaces.command_context import CommandContext
from src.commands.interfaces.command_result import CommandResult
from src.commands.pipeline.handler import CallNext, Handler
from src.config.constants import CACHE_NAMESPACE, DEFAULT_CACHE_EXPIRE_SECONDS


class CachingHandler(Handler):
    """
    Serves read-only commands from cache without running the rest of the chain.

    Cacheable commands are keyed by namespace, command name, caller and
    fields. A hit returns the cached payload and never delegates. After a
    successful command that invalidates the cache every entry in the
    namespace is cleared, so reads never outlive the writes that changed
    them.
    """

    def __init__(
        self,
        backend: Backend,
        namespace: str = CACHE_NAMESPACE,
        expire_seconds: int = DEFAULT_CACHE_EXPIRE_SECONDS,
    ):
        super().__init__()
        if expire_seconds <= 0:
            raise ValueError("expire_seconds must be positive")
        self._backend = backend
        self._namespace = namespace
        self._expire_seconds = expire_seconds

    @property
    def namespace(self) -> str:
        return self._namespace

    def build_cache_key(self, context: CommandContext) -> str:
        caller = context.identity.user_id if context.identity else "anonymous"
        fields = json.dumps(context.fields, sort_keys=True, default=str)
        return f"{self._namespace}:{context.command_name}:{caller}:{fields}"

    async def handle(
        self, context: CommandContext, call_next: Optional[CallNext]
    ) -> CommandResult:
        command = context.require_command()

        if not command.is_cacheable():
            result = await call_next(context)
            if result.is_success() and command.invalidates_cache():
                cleared = await self._backend.clear(namespace=self._namespace)
                self.logger.debug(
                    f"'{context.command_name}' succeeded, cleared {cleared} cached entries"
                )
            return result

        key = self.build_cache_key(context)
        cached = await self._backend.get(key)
        if cached is not None:
            self.logger.debug(f"Cache hit for '{context.command_name}' ({key})")
            context.add_metadata("cache", "hit")
            return CommandResult.success(
                request_id=context.request_id,
                command_name=context.command_name,
                data=json.loads(cached)["data"],
                metadata={"cache": "hit"},
            )

        result = await call_next(context)

        if result.is_success():
            payload = json.dumps({"data": result.data}, default=str).encode("utf-8")
            await self._backend.set(key, payload, expire=self._expire_seconds)
            context.add_metadata("cache", "miss")

        return result
