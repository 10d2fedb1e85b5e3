from typing import Optional

from fastapi_cache.backends import Backend

from src.commands.middleware import (
    AuthorizationHandler,
    CachingHandler,
    ErrorTranslationHandler,
    ExecutionHandler,
    OwnershipHandler,
    ResponseRenderingHandler,
    ValidationHandler,
)
from src.commands.pipeline.pipeline import Pipeline
from src.config.access_policy_loader import AccessPolicyLoader
from src.config.constants import CACHE_NAMESPACE, DEFAULT_CACHE_EXPIRE_SECONDS


def build_default_pipeline(
    policy_loader: AccessPolicyLoader,
    cache_backend: Optional[Backend] = None,
    cache_namespace: str = CACHE_NAMESPACE,
    cache_expire_seconds: int = DEFAULT_CACHE_EXPIRE_SECONDS,
) -> Pipeline:
    """
    Build the standard handler chain.

    Order: error translation, response rendering, authorization, validation,
    ownership, caching (only when a cache backend is given), execution.
    """
    handlers = [
        ErrorTranslationHandler(),
        ResponseRenderingHandler(),
        AuthorizationHandler(policy_loader),
        ValidationHandler(),
        OwnershipHandler(policy_loader),
    ]

    if cache_backend is not None:
        handlers.append(
            CachingHandler(
                cache_backend,
                namespace=cache_namespace,
                expire_seconds=cache_expire_seconds,
            )
        )

    handlers.append(ExecutionHandler())
    return Pipeline(handlers)
