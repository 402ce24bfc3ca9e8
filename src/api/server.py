#!/usr/bin/env python
"""FastAPI server for the Story Wizard web interface."""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

# Add src directory to Python path for imports
src_dir = Path(__file__).parent.parent
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import close_services
from api.routers import core, generation, wizard
from utils.config import load_config, validate_config
from utils.logging import setup_logging

config = load_config()
setup_logging(config["log_level"], json_output=config["log_json"])
logger = logging.getLogger(__name__)

for problem in validate_config(config):
    logger.warning(f"Configuration: {problem}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Story Wizard API starting")
    yield
    await close_services()
    logger.info("Story Wizard API stopped")


app = FastAPI(title="Story Wizard API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config["allowed_origins"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors (400), not 422."""
    logger.info(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request body", "errors": jsonable_encoder(exc.errors())},
    )


app.include_router(core.router)
app.include_router(generation.router)
app.include_router(wizard.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
