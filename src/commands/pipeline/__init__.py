"""
Handler chain that every command runs through.
"""

from .handler import CallNext, Handler
from .pipeline import Pipeline
from .responses import render_failure, render_result, render_success

__all__ = [
    "CallNext",
    "Handler",
    "Pipeline",
    "render_failure",
    "render_result",
    "render_success",
]
