"""FastAPI service in front of hosted code-generation providers.

Endpoints:
- GET /health
- GET /models
- POST /generate-code  { "prompt": "...", "language": "...", "model": "..." }

The /models and /generate-code routes are also mounted under /api.
"""
from __future__ import annotations
import os
import time
import logging

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from codegen_gateway.common.logging_setup import setup_logging
from codegen_gateway.common.settings import load_settings
from codegen_gateway.common.templates import load_template
from codegen_gateway.dispatch.dispatcher import Dispatcher
from codegen_gateway.dispatch.errors import ValidationError, classify
from codegen_gateway.dispatch.registry import build_registry
from codegen_gateway.dispatch.validator import validate

LOGGER = logging.getLogger("codegen.serve.app")

SETTINGS = load_settings()
setup_logging(SETTINGS.log_level)
REGISTRY = build_registry(SETTINGS)
DISPATCHER = Dispatcher(REGISTRY, timeout_s=SETTINGS.timeout_s, params=SETTINGS.params)

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LINE_LIMIT = 80
LOGGED_PATHS = ("/api", "/generate-code", "/models")

class GenerateOut(BaseModel):
    code: str
    language: str

class ModelOut(BaseModel):
    id: str
    url: str

def get_dispatcher() -> Dispatcher:
    return DISPATCHER

app = FastAPI()
router = APIRouter()

@app.on_event("startup")
def _log_startup() -> None:
    """Log registered models and warn if the code template lost its placeholders."""
    template = load_template()
    if "{{input}}" not in template or "{{language}}" not in template:
        LOGGER.warning("Code template is missing {{input}} or {{language}}")
    LOGGER.info("Registered models: %s", ", ".join(REGISTRY.ids()))

def request_log_line(method: str, path: str, status: int, duration_ms: int) -> str | None:
    """Access-log line for API routes, truncated to LOG_LINE_LIMIT; None for other paths."""
    if not path.startswith(LOGGED_PATHS):
        return None
    line = f"{method} {path} {status} in {duration_ms}ms"
    if len(line) > LOG_LINE_LIMIT:
        line = line[: LOG_LINE_LIMIT - 1] + "…"
    return line

@app.middleware("http")
async def _log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = int((time.time() - start) * 1000)
    line = request_log_line(request.method, request.url.path, response.status_code, duration)
    if line is not None:
        LOGGER.info(line)
    return response

@app.exception_handler(Exception)
async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = "Internal server error" if APP_ENV == "production" else str(exc)
    return JSONResponse(status_code=500, content={"error": message})

@app.get("/health")
def health(dispatcher: Dispatcher = Depends(get_dispatcher)) -> dict[str, object]:
    return {"status": "ok", "models": dispatcher.registry.ids()}

@router.get("/models", response_model=list[ModelOut])
def list_models(dispatcher: Dispatcher = Depends(get_dispatcher)) -> list[ModelOut]:
    return [ModelOut(id=endpoint.id, url=endpoint.url) for endpoint in dispatcher.registry]

@router.post("/generate-code", response_model=GenerateOut)
async def generate_code(request: Request, dispatcher: Dispatcher = Depends(get_dispatcher)):
    body = await request.body()
    try:
        raw = await request.json() if body.strip() else {}
    except ValueError:
        raw = None

    try:
        job = validate(raw)
    except ValidationError as e:
        LOGGER.warning("Validation error: %s", e)
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request data", "message": e.message},
        )

    try:
        result = await dispatcher.generate(job)
    except Exception as e:
        failure = classify(e, model=job.model)
        LOGGER.error("Code generation error (%s): %s", failure.kind.value, failure.message)
        return JSONResponse(
            status_code=failure.http_status,
            content={
                "error": "Failed to generate code",
                "kind": failure.kind.value,
                "message": failure.message,
                "model": failure.model,
            },
        )
    return GenerateOut(code=result.code, language=result.language)

app.include_router(router)
app.include_router(router, prefix="/api")
