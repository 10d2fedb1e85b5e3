from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class GoalResponse(BaseModel):
    id: int
    owner_id: int
    title: str
    description: Optional[str] = None
    url: Optional[str] = None
    image_url: Optional[str] = None
    image_content_type: Optional[str] = None
    created_at: str
    updated_at: str


class GoalListResponse(BaseModel):
    goals: List[GoalResponse]
    count: int


class SignUpResponse(BaseModel):
    user_id: int
    username: str
    role: str
    token: str = Field(..., description="Bearer token for the Authorization header")


class HealthCheckResponse(BaseModel):
    """Response model for health check endpoint"""

    overall_status: str = Field(..., description="Overall system health status")
    timestamp: float = Field(..., description="Unix timestamp of the health check")
    checks: Dict[str, Dict[str, Any]] = Field(
        ..., description="Individual component health checks"
    )
    unhealthy_components: int = Field(..., description="Number of unhealthy components")


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None
    request_id: str


class FieldErrorResponse(BaseModel):
    rule: str
    message: str


class ValidationErrorResponse(ErrorResponse):
    errors: Dict[str, List[FieldErrorResponse]] = Field(
        ..., description="Failed rules per field, in declaration order"
    )


ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    401: {"model": ErrorResponse, "description": "Missing or invalid credential"},
    403: {"model": ErrorResponse, "description": "Insufficient privilege"},
    422: {"model": ValidationErrorResponse, "description": "Validation failed"},
    500: {"model": ErrorResponse, "description": "Unclassified failure"},
}
