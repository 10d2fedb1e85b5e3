from typing import Optional
from pydantic import BaseModel, Field

# Fields are optional on purpose: presence is a pipeline validation rule, so
# a missing field yields the pipeline's per-field 422 body.


class SignUpRequest(BaseModel):
    username: Optional[str] = Field(None, description="Lowercase login name")


class CreateGoalRequest(BaseModel):
    title: Optional[str] = Field(None, description="Short title of the goal")
    description: Optional[str] = Field(None, description="Longer description")
    url: Optional[str] = Field(None, description="Related link (http or https)")


class UpdateGoalRequest(BaseModel):
    title: Optional[str] = Field(None, description="New title")
    description: Optional[str] = Field(None, description="New description")
    url: Optional[str] = Field(None, description="New related link")


class AttachGoalImageRequest(BaseModel):
    image_url: Optional[str] = Field(None, description="URL of the image")
    content_type: Optional[str] = Field(
        None, description="MIME type of the image (e.g. 'image/png')"
    )
