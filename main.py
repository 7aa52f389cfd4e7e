# main.py
"""
FastAPI entry point for the nutrition admin service.
Startup/readiness behavior, structured logging, request-id middleware,
and error translation for the persistence layer.
"""
import asyncio
import logging
import os
import uuid
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from postgrest.exceptions import APIError

from app.api.clients import conversations_router
from app.api.clients import router as clients_router
from app.api.ingredients import router as ingredients_router
from app.api.recipes import router as recipes_router
from app.config.settings import settings
from app.config.supabase import supabase_client
from app.db.client import SupabaseClientNotInitialized, get_client_diagnostics
from app.models import create_schema, get_engine
from app.services.errors import PartialWriteError, RecordNotFoundError

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("uvicorn.error")


async def _run_sync_in_executor(fn, *args, timeout: float = settings.health_check_timeout):
    """
    Helper to run blocking sync functions in the default threadpool with a timeout.
    Returns the function's result or raises TimeoutError.
    """
    loop = asyncio.get_running_loop()
    return await asyncio.wait_for(loop.run_in_executor(None, fn, *args), timeout=timeout)


def _bootstrap_schema() -> None:
    engine = get_engine()
    try:
        create_schema(engine)
    finally:
        engine.dispose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting nutrition admin service...")

    if settings.auto_create_schema and settings.database_url:
        await _run_sync_in_executor(_bootstrap_schema, timeout=60.0)

    supabase_healthy = False
    try:
        supabase_healthy = await _run_sync_in_executor(supabase_client.health_check)
    except asyncio.TimeoutError:
        logger.warning(
            "Supabase health_check timed out after %.1fs", settings.health_check_timeout
        )

    app.state.supabase_healthy = bool(supabase_healthy)
    logger.info("Supabase health: %s", app.state.supabase_healthy)

    if not app.state.supabase_healthy and settings.fail_on_db_startup:
        logger.error("FAIL_ON_DB_STARTUP enabled and Supabase unhealthy. Aborting startup.")
        raise RuntimeError("Supabase unhealthy on startup")

    yield
    logger.info("Shutting down nutrition admin service...")


app = FastAPI(
    title="Nutrition Admin",
    description="Recipes, ingredients and clients of a nutrition service",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Simple request-id middleware + structured request logging
@app.middleware("http")
async def add_request_id_and_log(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
    request.state.request_id = request_id
    logger.info("→ Incoming request %s %s id=%s", request.method, request.url.path, request_id)
    response: Response = await call_next(request)
    logger.info(
        "← Completed request id=%s status=%s", request_id, getattr(response, "status_code", None)
    )
    response.headers["X-Request-Id"] = request_id
    return response


# -----------------------
# Error translation
# -----------------------
@app.exception_handler(RecordNotFoundError)
async def not_found_handler(request: Request, exc: RecordNotFoundError):
    return JSONResponse(
        {"ok": False, "error": "not_found", "diagnostics": {"table": exc.table, "id": exc.record_id}},
        status_code=404,
    )


@app.exception_handler(PartialWriteError)
async def partial_write_handler(request: Request, exc: PartialWriteError):
    return JSONResponse(exc.to_result(), status_code=502)


@app.exception_handler(APIError)
async def store_error_handler(request: Request, exc: APIError):
    logger.warning("Store rejected request %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        {
            "ok": False,
            "error": "store_error",
            "diagnostics": {"code": exc.code, "message": exc.message, "details": exc.details},
        },
        status_code=400,
    )


@app.exception_handler(SupabaseClientNotInitialized)
async def unavailable_handler(request: Request, exc: SupabaseClientNotInitialized):
    return JSONResponse(
        {"ok": False, "error": "supabase_client_unavailable", "diagnostics": get_client_diagnostics()},
        status_code=503,
    )


app.include_router(recipes_router, prefix="/api/recipes", tags=["recipes"])
app.include_router(ingredients_router, prefix="/api/ingredients", tags=["ingredients"])
app.include_router(clients_router, prefix="/api/clients", tags=["clients"])
app.include_router(conversations_router, prefix="/api/conversations", tags=["conversations"])


@app.get("/")
async def root() -> Dict[str, str]:
    return {"message": "Nutrition admin service is running!", "status": "healthy"}


@app.get("/health")
async def health_check():
    """
    Liveness style check. Runs a quick supabase health_check (with timeout)
    but does not fail hard; returns degraded if DB is down.
    """
    try:
        db_ok = await _run_sync_in_executor(supabase_client.health_check)
    except asyncio.TimeoutError:
        logger.warning("Supabase health_check timed out on /health")
        db_ok = False

    return JSONResponse(
        {
            "status": "healthy" if db_ok else "degraded",
            "service": "nutrition-admin",
            "database": "connected" if db_ok else "disconnected",
            "diagnostics": get_client_diagnostics(),
        },
        status_code=200 if db_ok else 503,
    )


@app.get("/ready")
async def readiness_check():
    """
    Readiness: uses cached state from startup when available.
    If state was never set, attempt one bounded check.
    """
    supabase_state: Optional[bool] = getattr(app.state, "supabase_healthy", None)
    if supabase_state is None:
        try:
            supabase_state = await _run_sync_in_executor(supabase_client.health_check, timeout=2.0)
        except asyncio.TimeoutError:
            supabase_state = False

    if supabase_state:
        return JSONResponse({"ready": True, "database": "connected"}, status_code=200)
    return JSONResponse({"ready": False, "database": "disconnected"}, status_code=503)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", 5000)), reload=True)
