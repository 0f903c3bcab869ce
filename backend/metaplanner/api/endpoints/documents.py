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

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from metaplanner.api.models import DocumentUploadResponse, PlanStateResponse
from metaplanner.core.document_processor import UploadedDocument
from metaplanner.core.plan_controller import PlanController, get_plan_controller
from metaplanner.core.plan_state import Step
from metaplanner.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/upload", response_model=DocumentUploadResponse)
async def upload_document(
    file: UploadFile = File(...),
    controller: PlanController = Depends(get_plan_controller),
):
    """
    Read an uploaded file into the planner input.

    The extracted text replaces the current input. A file that cannot be
    read leaves the input unchanged and is reported with success=False.
    An upload superseded by a reset or mode change while it was parsed is
    answered with 409.
    """
    if controller.state.step is not Step.INPUT or controller.state.is_parsing_file:
        raise HTTPException(
            status_code=409, detail="Uploads are only accepted on the input step"
        )

    content = await file.read()
    document = UploadedDocument(
        filename=file.filename or "",
        content=content,
        content_type=file.content_type,
    )
    logger.info(f"Upload received: {document.filename} ({document.size} bytes)")

    if not await controller.load_document(document):
        raise HTTPException(
            status_code=409, detail="Upload discarded: the planner was reset or changed mode"
        )

    state = controller.state
    snapshot = PlanStateResponse(**controller.snapshot())

    if state.error:
        return DocumentUploadResponse(
            success=False,
            message="File could not be read",
            file_name=document.filename,
            error=state.error,
            state=snapshot,
        )

    return DocumentUploadResponse(
        success=True,
        message="File loaded into the planner input",
        file_name=document.filename,
        metadata={
            "characters": len(state.user_input),
            "file_size": document.size,
        },
        state=snapshot,
    )
