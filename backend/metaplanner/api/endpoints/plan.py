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

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from metaplanner.api.models import (
    InputRequest,
    ModeRequest,
    PlanStateResponse,
    RefineRequest,
)
from metaplanner.core.plan_controller import PlanController, get_plan_controller
from metaplanner.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/plan", tags=["plan"])


def _state_response(controller: PlanController) -> PlanStateResponse:
    return PlanStateResponse(**controller.snapshot())


@router.get("/state", response_model=PlanStateResponse)
async def get_state(controller: PlanController = Depends(get_plan_controller)):
    """Current planner state, including a progress message while working."""
    return _state_response(controller)


@router.post("/mode", response_model=PlanStateResponse)
async def select_mode(
    request: ModeRequest, controller: PlanController = Depends(get_plan_controller)
):
    """Choose create or enhance; any previous session is discarded."""
    controller.select_mode(request.mode)
    return _state_response(controller)


@router.put("/input", response_model=PlanStateResponse)
async def set_input(
    request: InputRequest, controller: PlanController = Depends(get_plan_controller)
):
    controller.set_input(request.text)
    return _state_response(controller)


@router.post("/submit", response_model=PlanStateResponse)
async def submit_plan(controller: PlanController = Depends(get_plan_controller)):
    """
    Run the initial planning exchange.

    Failures are reported in the returned state's ``error`` field, not as
    HTTP errors, mirroring what the user sees on the input screen.
    """
    await controller.submit()
    return _state_response(controller)


@router.post("/refine", response_model=PlanStateResponse)
async def refine_plan(
    request: RefineRequest, controller: PlanController = Depends(get_plan_controller)
):
    """Send one refinement message on the live planning session."""
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Refinement message is empty")

    accepted = await controller.refine(request.message)
    if not accepted:
        raise HTTPException(
            status_code=409,
            detail="No planning session to refine or a refinement is already running",
        )
    return _state_response(controller)


@router.post("/reset", response_model=PlanStateResponse)
async def reset_plan(controller: PlanController = Depends(get_plan_controller)):
    controller.reset()
    return _state_response(controller)


@router.get("/download")
async def download_plan(controller: PlanController = Depends(get_plan_controller)):
    """Download the current plan as a markdown file."""
    exported = controller.export_plan()
    if exported is None:
        raise HTTPException(status_code=404, detail="No plan available for download")

    filename, text = exported
    logger.info(f"Plan exported ({len(text)} characters)")
    return Response(
        content=text,
        media_type="text/markdown; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
