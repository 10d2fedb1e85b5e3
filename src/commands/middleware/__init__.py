"""
Pipeline handlers, one cross-cutting responsibility each.
"""

from .authorization import AuthorizationHandler
from .caching import CachingHandler
from .error_translation import ErrorTranslationHandler
from .execution import ExecutionHandler
from .ownership import OwnershipHandler
from .response_rendering import ResponseRenderingHandler
from .validation import ValidationHandler

__all__ = [
    "AuthorizationHandler",
    "CachingHandler",
    "ErrorTranslationHandler",
    "ExecutionHandler",
    "OwnershipHandler",
    "ResponseRenderingHandler",
    "ValidationHandler",
]
