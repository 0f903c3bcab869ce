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

from fastapi import APIRouter

from metaplanner.api.models import HealthResponse
from metaplanner.core.document_processor import ACCEPTED_EXTENSIONS
from metaplanner.core.llm_providers import get_available_providers
from metaplanner.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/", response_model=HealthResponse)
async def health_check():
    """Health check with planning provider availability."""
    logger.debug("Health check requested")

    providers = get_available_providers()
    services = {provider.value: available for provider, available in providers.items()}
    services["llm"] = any(providers.values())
    services["documents"] = True

    return HealthResponse(
        status="ok",
        timestamp=datetime.now(),
        services=services,
        accepted_extensions=sorted(ACCEPTED_EXTENSIONS),
    )
