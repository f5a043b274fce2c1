import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from .coordinator import TaskCoordinator, get_coordinator
from .logging_setup import setup_logging
from .routers import tasks as tasks_router
from .settings import get_settings
from .views import render_page

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Add, toggle, update and remove tasks; read the rendered list and pending count.",
    },
    {"name": "page", "description": "HTML page displaying the task list."},
]

_settings = get_settings()
setup_logging(level=_settings.log_level, log_file=_settings.log_file)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initial render, the equivalent of the page-load trigger.
    get_coordinator().initialize()
    yield


app = FastAPI(
    title="Task List",
    description="To-do list service with pluggable key-value task storage.",
    version="0.1.0",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handlers for consistent JSON on validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    logger.debug("Request validation failed for %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": exc.errors(),
        },
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check(coordinator: TaskCoordinator = Depends(get_coordinator)):
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health and the storage backend in use.
    """
    return {"message": "Healthy", "backend": coordinator.repository.persistence.store.backend_name}


# PUBLIC_INTERFACE
@app.get("/app", response_class=HTMLResponse, summary="Task List Page", tags=["page"])
def task_page(coordinator: TaskCoordinator = Depends(get_coordinator)) -> HTMLResponse:
    """Render the task list page from a fresh snapshot."""
    return HTMLResponse(render_page(coordinator.refresh()))


# Include routers
app.include_router(tasks_router.router)
