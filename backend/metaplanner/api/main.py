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

from contextlib import asynccontextmanager
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from metaplanner.api.endpoints import documents, health, plan
from metaplanner.core.llm_providers import get_available_providers
from metaplanner.utils.config import get_settings
from metaplanner.utils.logging import get_logger, setup_logging
from metaplanner.utils.security import BYTES_PER_MB

logger = get_logger(__name__)

# Configuration
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and report which planning providers are usable."""
    setup_logging(settings)
    logger.info("Metacognitive Study Planner backend starting...")

    available = [
        provider.value
        for provider, is_available in get_available_providers().items()
        if is_available
    ]
    if available:
        logger.info(f"Planning providers available: {', '.join(available)}")
    else:
        logger.warning(
            "No planning provider API key configured; set GEMINI_API_KEY or OPENAI_API_KEY"
        )

    logger.info(f"API available at: http://{settings.host}:{settings.port}")
    yield
    logger.info("Metacognitive Study Planner backend stopped")


app = FastAPI(
    title="Metacognitive Study Planner API",
    description="Builds and refines metacognitive study plans grounded in learning science",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware (env-driven)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With", "X-Request-ID"],
)


# Security headers middleware (CSP disabled by default when served behind a proxy)
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if settings.enable_api_csp_headers:
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; script-src 'self'; style-src 'self'; img-src 'self' data: https:; connect-src 'self'"
        )

    return response


# Request context: ID, body-size check, access log
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    # Assign or propagate request ID
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    # Body size guard based on Content-Length
    max_bytes = settings.max_upload_size_mb * BYTES_PER_MB
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit():
        if int(content_length) > max_bytes:
            logger.warning(
                f"request_id={request_id} rejected: body of {content_length} bytes"
            )
            return JSONResponse(
                status_code=413,
                content={"detail": "Request entity too large"},
                headers={"X-Request-ID": request_id},
            )

    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Request-ID"] = request_id
    logger.info(
        f"request_id={request_id} {request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s"
    )
    return response


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Include routers
app.include_router(health.router)
app.include_router(plan.router)
app.include_router(documents.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
