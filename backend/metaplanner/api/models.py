"""
Copyright 2024 Metacognitive Study Planner Contributors

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from metaplanner.core.prompts import PlanMode


class ModeRequest(BaseModel):
    mode: PlanMode = Field(..., description="Planning mode: 'create' or 'enhance'")


class InputRequest(BaseModel):
    text: str = Field(..., description="Full replacement for the input text")


class RefineRequest(BaseModel):
    message: str = Field(..., description="Follow-up message for the planner")


class PlanStateResponse(BaseModel):
    step: str = Field(..., description="Current step: welcome, input, processing or result")
    mode: Optional[PlanMode] = Field(None, description="Selected planning mode")
    user_input: str = Field("", description="Current input text")
    plan_result: str = Field("", description="Latest plan or planner reply (markdown)")
    error: Optional[str] = Field(None, description="User-facing error message if any")
    has_session: bool = Field(False, description="Whether a planning session is live")
    is_refining: bool = Field(False, description="Whether a refinement is in flight")
    is_parsing_file: bool = Field(False, description="Whether an upload is being parsed")
    loading_message: Optional[str] = Field(
        None, description="Progress message while the planner is working"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "step": "result",
                "mode": "create",
                "user_input": "Organic chemistry final in 3 weeks",
                "plan_result": "Great! How long should this plan cover?",
                "error": None,
                "has_session": True,
                "is_refining": False,
                "is_parsing_file": False,
                "loading_message": None,
            }
        }


class DocumentUploadResponse(BaseModel):
    success: bool = Field(True, description="Whether the file was read")
    message: str = Field(..., description="Status message")
    file_name: Optional[str] = Field(None, description="Uploaded file name")
    error: Optional[str] = Field(None, description="Error message if any")
    metadata: Dict[str, Any] = Field(
        default_factory=dict, description="Extraction metadata"
    )
    state: PlanStateResponse = Field(..., description="Planner state after the upload")


class HealthResponse(BaseModel):
    status: str = Field("ok", description="Service status")
    timestamp: datetime = Field(default_factory=datetime.now)
    services: Dict[str, bool] = Field(
        default_factory=dict, description="Service availability"
    )
    accepted_extensions: List[str] = Field(
        default_factory=list, description="File types accepted for upload"
    )
