#!/usr/bin/env python3
"""
FastAPI Backend Startup Script
Configures the Python path and starts the planner API server
"""

import os
from pathlib import Path
import sys

# Add the backend directory to Python path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))

# Set environment variables for proper module resolution
os.environ["PYTHONPATH"] = str(backend_dir)

if __name__ == "__main__":
    import uvicorn

    from metaplanner.utils.config import get_settings

    settings = get_settings()

    # Import string keeps reload working
    uvicorn.run(
        "metaplanner.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        reload_dirs=[str(backend_dir)],
        log_level=settings.log_level.lower(),
    )
