"""Application entry point for the Nutrition Needs API.

Defines FastAPI app, middleware, exception handlers and includes API
routers from the `api` package.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from core.config import APP_TITLE, APP_VERSION, CORS_ORIGINS
from core.logger import get_logger
from core.error_handlers import register_exception_handlers
from api.nutrition import router as nutrition_router

logger = get_logger("main")

app = FastAPI(title=APP_TITLE, version=APP_VERSION)


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log incoming requests and their responses."""
    logger.info("%s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
        logger.info("%s %s -> %s", request.method, request.url.path, response.status_code)
        return response
    except Exception:
        logger.exception("Request error: %s %s", request.method, request.url.path)
        raise


@app.get("/health")
def health():
    """Return basic health status and the running version."""
    return {"status": "healthy", "version": APP_VERSION}


# include routers
app.include_router(nutrition_router)


if __name__ == "__main__":
    # Allow starting the app via `python ./main.py`
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
