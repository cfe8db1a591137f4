import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from taskflow.core import database
from taskflow.core.config import settings
from taskflow.core.errors import AppError
from taskflow.core.logging_setup import setup_logging
from taskflow.routers import health, auth, users, tasks, realtime

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Init DB
    database.Base.metadata.create_all(bind=database.engine)
    if settings.uses_default_secret:
        logger.warning("SESSION_SECRET is not set, sessions are signed with the built-in default key")
    yield


app = FastAPI(
    title="TaskFlow API",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,  # cookie de session
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # premier message de validation seulement, en 400
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Validation error"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": message})


# Routes
app.include_router(health.router, prefix="/health")
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(tasks.router, prefix="/api")
app.include_router(realtime.router)
