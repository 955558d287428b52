"""
Todo Service - todo items and user accounts with token authentication
"""
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from .auth import TokenService
from .config import settings
from .db import engine, init_db
from .errors import TodoServiceError
from .routes import health, todos, users

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and the token service on startup, release the pool on shutdown"""
    init_db()
    app.state.token_service = TokenService(settings.JWT_SECRET, settings.JWT_ALGORITHM)
    logger.info("Todo Service started")
    yield
    engine.dispose()
    logger.info("Todo Service stopped")


app = FastAPI(
    title="Todo Service",
    description="Todo items and user accounts with token authentication",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS, exposing the token header to browser clients
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[settings.AUTH_HEADER],
)


@app.exception_handler(TodoServiceError)
async def todo_service_error_handler(request: Request, exc: TodoServiceError):
    logger.info("%s on %s %s -> %s", type(exc).__name__, request.method, request.url.path, exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


# Include routers
app.include_router(todos.router)
app.include_router(users.router)
app.include_router(health.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
