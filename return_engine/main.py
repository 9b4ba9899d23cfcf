"""
Main FastAPI application entry point.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from return_engine import __version__
from return_engine.config import get_settings
from return_engine.api import router as api_router
from return_engine.calculations.errors import InvalidInputError

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Real estate rate-of-return and projection engine",
    version=__version__,
    debug=settings.debug,
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    """Report out-of-range financial inputs as unprocessable."""
    logger.warning("Invalid input on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=422,
        content={"detail": exc.message, "field": exc.field},
    )


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": __version__}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
