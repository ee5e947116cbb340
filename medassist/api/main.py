"""
FastAPI Application Entry Point.

This module creates and configures the FastAPI application instance:
1. Router registration
2. Middleware (audit, security headers, CORS in development)
3. Exception handlers for the assistant's error hierarchy
4. Startup/shutdown

Run with: uvicorn medassist.api.main:app --reload
"""
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from medassist import __version__
from medassist.agents import reset_orchestrator
from medassist.api.routes import (
    agents_router,
    chat_router,
    health_router,
    identify_router,
    session_router,
    speech_router,
)
from medassist.core.audit import AuditMiddleware, SecurityHeadersMiddleware
from medassist.core.config import check_environment, get_settings
from medassist.core.exceptions import AssistantException, RateLimitExceeded
from medassist.core.logging_config import get_logger, setup_logging

# Initialize logging before anything else
settings = get_settings()
setup_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode")
    logger.info(f"LLM model: {settings.llm_model} (vision: {settings.llm_vision_model})")
    logger.info(f"Rate limit: {settings.rate_limit_per_minute} req/min")
    logger.info(f"Audit logging: {settings.enable_audit_logging}")

    environment = check_environment()
    for variable in environment["missing_required"]:
        logger.error(f"Required environment variable {variable} is not set")
    for warning in environment["warnings"]:
        logger.warning(warning)

    if settings.memory_persistent:
        from medassist.database.init_db import init_chat_tables
        init_chat_tables()

    yield

    logger.info(f"Shutting down {settings.app_name}")
    reset_orchestrator()
    if settings.memory_persistent:
        from medassist.database.connection import reset_database
        reset_database()


app = FastAPI(
    title="MedAssist API",
    description="""
    A multi-agent medical information assistant.

    ## Features

    - **Medicine information** from text or photos
    - **Drug interactions**, **dosage** and **side effects** explained for education
    - **Handwritten prescriptions** read via OCR
    - **Pill scanner** and **voice input**
    - **English and Urdu** responses

    Answers are educational only and never replace a healthcare professional.
    """,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ============================================================
# Middleware Configuration (last added runs first)
# ============================================================

app.add_middleware(SecurityHeadersMiddleware)

if settings.enable_audit_logging:
    app.add_middleware(AuditMiddleware)
    logger.info("Audit logging middleware enabled")

if settings.is_development():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.warning("CORS configured for development (all origins allowed)")


# ============================================================
# Exception Handlers
# ============================================================

@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers={"Retry-After": str(exc.retry_after)}
    )


@app.exception_handler(AssistantException)
async def assistant_exception_handler(request: Request, exc: AssistantException):
    """Every error in the hierarchy maps to its own status code."""
    content = exc.to_dict()
    if not settings.is_development():
        content["details"] = None
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Handle uncaught exceptions globally.

    Detailed error information is only included in development mode.
    """
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "details": str(exc) if settings.is_development() else None,
            "timestamp": datetime.utcnow().isoformat()
        }
    )


# ============================================================
# Routers
# ============================================================

app.include_router(health_router)
app.include_router(chat_router)
app.include_router(identify_router)
app.include_router(speech_router)
app.include_router(agents_router)
app.include_router(session_router)


@app.get("/", include_in_schema=False)
async def root():
    return {
        "message": "MedAssist API",
        "version": __version__,
        "documentation": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "medassist.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development()
    )
