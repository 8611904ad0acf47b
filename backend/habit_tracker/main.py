import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from habit_tracker import config
from habit_tracker.auth.firebase import initialize_firebase
from habit_tracker.api.auth import router as auth_router
from habit_tracker.api.users import router as users_router
from habit_tracker.api.habits import router as habits_router
from habit_tracker.api.track import router as track_router
from habit_tracker.api.analytics import router as analytics_router
from habit_tracker.api.todos import router as todos_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    initialize_firebase()
    logger.info(f"[STARTUP] {config.APP_TITLE} ready")
    yield


app = FastAPI(
    lifespan=lifespan,
    title=config.APP_TITLE,
    description="Backend API for tracking habits, streaks, badges and leaderboards",
    version="1.0.0",
)

# Configure CORS for the single-page client
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(auth_router, prefix=config.API_PREFIX)
app.include_router(users_router, prefix=config.API_PREFIX)
app.include_router(habits_router, prefix=config.API_PREFIX)
app.include_router(track_router, prefix=config.API_PREFIX)
app.include_router(analytics_router, prefix=config.API_PREFIX)
app.include_router(todos_router, prefix=config.API_PREFIX)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.get(
    "/health",
    tags=["health"],
    summary="Health check endpoint",
    description="Returns the health status of the API",
)
def health_check():
    """Basic health check endpoint to verify the API is running.

    Returns:
        dict: Health status information
    """
    return {
        "status": "healthy",
        "service": config.APP_TITLE,
    }


@app.get("/")
def root():
    return {"status": "ok", "service": "habit-tracker backend"}
