"""FastAPI application entry point."""

import warnings
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import get_settings
from api.models.responses import ErrorCodes, ErrorResponse
from api.routes import health_router, invoices_router
from core.config import API_VERSION, EMAIL_TEMPLATE_PATH


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    if not settings.config_file.exists():
        warnings.warn(f"Invoice configuration not found at {settings.config_file}")
    if not EMAIL_TEMPLATE_PATH.exists():
        warnings.warn(f"Email template not found at {EMAIL_TEMPLATE_PATH}")
    if not settings.api_key:
        warnings.warn("INVOICE_API_KEY is not set; /v1 endpoints will refuse requests")

    yield


settings = get_settings()

app = FastAPI(
    title="Git Invoice Generation API",
    description="REST API for generating client invoices from git commit history",
    version=API_VERSION,
    debug=settings.api_debug,
    lifespan=lifespan,
)

# CORS middleware (for development)
if settings.api_debug:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Return HTTP errors in the standard error format."""
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        code = {
            401: ErrorCodes.UNAUTHORIZED,
            404: ErrorCodes.NOT_FOUND,
        }.get(exc.status_code, ErrorCodes.INVALID_REQUEST)
        content = ErrorResponse(error=str(exc.detail), code=code, details=[]).model_dump()
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


# Global exception handler for unexpected errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with standard error format."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            code=ErrorCodes.INTERNAL_ERROR,
            details=[],
        ).model_dump(),
    )


app.include_router(health_router)
app.include_router(invoices_router)


# Entry point for uvicorn
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
