# main.py
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings, get_settings
from db import create_store
from errors import InternalError, ScoreboardError
from schemas import Health
from security import TokenIssuer
import auth
import scores

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# --- Error translation ---

async def scoreboard_error_handler(request: Request, exc: ScoreboardError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.debug("[API] Rejected request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Invalid request body"})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("[API] Unhandled error on %s %s", request.method, request.url.path)
    return await scoreboard_error_handler(request, InternalError())


def create_app(settings: Optional[Settings] = None, store=None) -> FastAPI:
    """Build the API around an explicitly owned store and token issuer."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Scoreboard API",
        description="Personal scoreboards behind bearer-token authentication.",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.store = store if store is not None else create_store(settings)
    app.state.token_issuer = TokenIssuer(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.access_token_expire_minutes,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ScoreboardError, scoreboard_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(scores.router, prefix="/api/scores", tags=["scores"])

    @app.get("/api/health", response_model=Health)
    def health(request: Request):
        current = request.app.state.store
        return Health(
            status="OK",
            backend=current.name,
            database="Connected" if current.ping() else "Disconnected",
        )

    return app


app = create_app()
