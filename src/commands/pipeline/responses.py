"""
Mapping of command results to transport-level responses.
"""

from typing import Dict

from src.commands.interfaces.command_context import PipelineResponse
from src.commands.interfaces.command_result import CommandResult, ErrorCategory

STATUS_OK = 200
STATUS_NO_CONTENT = 204

FAILURE_STATUS: Dict[ErrorCategory, int] = {
    ErrorCategory.UNAUTHORIZED: 401,
    ErrorCategory.FORBIDDEN: 403,
    ErrorCategory.VALIDATION: 422,
    ErrorCategory.UNCLASSIFIED: 500,
}

GENERIC_ERROR_MESSAGE = "Internal server error"


def render_success(result: CommandResult) -> PipelineResponse:
    if not result.has_data():
        return PipelineResponse(status_code=STATUS_NO_CONTENT)
    return PipelineResponse(status_code=STATUS_OK, body=result.data)


def render_failure(result: CommandResult) -> PipelineResponse:
    category = result.error_category or ErrorCategory.UNCLASSIFIED
    status_code = FAILURE_STATUS[category]

    if category == ErrorCategory.VALIDATION:
        body = {
            "error": "validation_failed",
            "message": result.error_message or "Validation failed",
            "errors": result.error_details.get("errors", {}),
        }
    elif category == ErrorCategory.UNCLASSIFIED:
        # Details stay in the logs
        body = {"error": "internal_error", "message": GENERIC_ERROR_MESSAGE}
    else:
        body = {"error": category.value, "message": result.error_message}

    body["request_id"] = result.request_id
    return PipelineResponse(status_code=status_code, body=body)


def render_result(result: CommandResult) -> PipelineResponse:
    if result.is_success():
        return render_success(result)
    return render_failure(result)
