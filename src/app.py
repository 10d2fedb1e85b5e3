from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from typing import Any, AsyncGenerator
from .routers import goals
from .config.constants import DEFAULT_CORS_ALLOW_ORIGINS, PROJECT_ROOT
from contextlib import asynccontextmanager
import os
import logging
from dotenv import load_dotenv

# Configure logging at module level
logging.basicConfig(
    level=logging.WARNING,  # Set default to WARNING for all loggers
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)

# Set your application loggers to DEBUG
logging.getLogger("src").setLevel(logging.DEBUG)  # All src.* modules
logging.getLogger("__main__").setLevel(logging.DEBUG)  # Main module if needed

# Keep third-party loggers at INFO or WARNING to reduce noise
logging.getLogger("uvicorn.access").setLevel(logging.INFO)
logging.getLogger("uvicorn.error").setLevel(logging.INFO)
logging.getLogger("asyncio").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[Any, Any]:
    # Load environment variables at startup
    env_path = os.path.join(PROJECT_ROOT, ".env")
    if os.path.exists(env_path):
        load_dotenv(env_path)
        logger.info(f"Loaded environment from {env_path}")
    else:
        logger.info(f"No .env file found at {env_path}, using system environment variables")

    goals.get_command_executor()
    yield


app = FastAPI(
    lifespan=lifespan,
    title="Goal Tracker",
    description="Goal tracking API whose endpoints run commands through an authorization, validation and ownership pipeline",
    version="1.0.0",
)

# Add CORS middleware
# Note: allow_credentials=True is incompatible with allow_origins=["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.environ.get("CORS_ALLOW_ORIGINS", DEFAULT_CORS_ALLOW_ORIGINS).split(",")
        if origin.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

# Include routers
app.include_router(goals.router)


@app.get("/")
async def root() -> dict[str, Any]:
    return {
        "message": "Welcome to the Goal Tracker API",
        "docs_url": "/docs",
        "endpoints": {"goal_tracker": "/goal-tracker/"},
    }
