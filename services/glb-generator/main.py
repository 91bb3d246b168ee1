from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import structlog
import uvicorn

# Internal Imports
from core.config import settings
from core.dependencies import get_generation_service
from core.exceptions import AgentError, ValidationException
from core.logging import configure_logging
from core.telemetry import setup_telemetry
from domain.models import (
    ErrorResponse,
    GenerationRequest,
    StartGenerationResponse,
    TaskStatusResponse,
)
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

# MCP Imports
from fastmcp import FastMCP
from services.generation_service import GenerationService

# 1. Configure Logging
configure_logging(json_logs=(settings.ENV == "production"), log_level=settings.LOG_LEVEL)
logger = structlog.get_logger()

# 2. MCP Server Setup
mcp = FastMCP(settings.APP_NAME)


@mcp.tool(name="start_glb_generation")
async def start_glb_generation_tool(prompt: str) -> str:
    """
    Generates an image from the prompt and starts a GLB task. Returns the Task ID.
    """
    logger.info("mcp_tool_called", tool="start_glb_generation", prompt=prompt)
    result = await get_generation_service().start_generation(prompt)
    return f"Task submitted. ID: {result.taskId}"


@mcp.tool(name="check_glb_task")
async def check_glb_task_tool(task_id: str) -> Dict[str, Any]:
    """
    Polls a GLB task once. Downloads the model when it is finished.
    """
    logger.info("mcp_tool_called", tool="check_glb_task", task_id=task_id)
    result = await get_generation_service().check_task(task_id)
    return result.model_dump()


mcp_app = mcp.http_app(path="/")


# 3. Lifespan (Startup/Shutdown)
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("startup_initiated", env=settings.ENV, public_dir=str(settings.PUBLIC_DIR))

    settings.PUBLIC_DIR.mkdir(parents=True, exist_ok=True)
    if settings.ENABLE_TRACING:
        setup_telemetry(settings)

    async with mcp_app.lifespan(app):
        yield

    logger.info("shutdown_initiated")


# 4. Create Main App
app = FastAPI(title=settings.APP_NAME, lifespan=lifespan, version="1.0.0")


# 5. Exception Handlers
def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@app.exception_handler(ValidationException)
async def validation_error_handler(request: Request, exc: ValidationException):
    logger.warning("request_rejected", error=str(exc), path=request.url.path)
    return _error(400, str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning("request_malformed", errors=exc.errors(), path=request.url.path)
    return _error(400, "Invalid request body")


@app.exception_handler(AgentError)
async def agent_error_handler(request: Request, exc: AgentError):
    logger.error(
        "request_failed",
        error=str(exc),
        error_type=type(exc).__name__,
        cause=str(exc.original_error) if exc.original_error else None,
        path=request.url.path,
    )
    return _error(500, str(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("unhandled_exception", error=str(exc), path=request.url.path)
    return _error(500, "Internal Server Error")


# 6. Mount MCP
app.mount("/mcp", mcp_app)


# 7. REST Endpoints
@app.get("/", include_in_schema=False)
async def index():
    return FileResponse(settings.PUBLIC_DIR / "index.html")


@app.post("/api/start-glb", response_model=StartGenerationResponse)
async def start_glb_endpoint(
    payload: Optional[GenerationRequest] = None,
    service: GenerationService = Depends(get_generation_service),
) -> StartGenerationResponse:
    """
    Generate the image and submit the Tripo task. Returns the task id immediately.
    """
    prompt = payload.prompt if payload else None
    return await service.start_generation(prompt)


@app.get("/api/check-task", response_model=TaskStatusResponse, include_in_schema=False)
@app.get("/api/check-task/", response_model=TaskStatusResponse, include_in_schema=False)
@app.get("/api/check-task/{task_id}", response_model=TaskStatusResponse)
async def check_task_endpoint(
    task_id: Optional[str] = None,
    service: GenerationService = Depends(get_generation_service),
) -> TaskStatusResponse:
    """
    Poll once. The client owns cadence and timeout.
    """
    return await service.check_task(task_id)


@app.get("/health")
def health_check():
    return {"status": "ok", "env": settings.ENV}


# 8. Static files (room.png, model.glb). Mounted last so it never shadows the API.
app.mount("/", StaticFiles(directory=settings.PUBLIC_DIR, check_dir=False), name="public")


if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT)
