"""FastAPI application: middleware, error handlers and routers."""
import logging
import os
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coach_relay.core.config import ENV_FILE, Settings, get_settings
from coach_relay.core.middleware import BodySizeLimitMiddleware
from coach_relay.api.deps import get_completion_client
from coach_relay.api.routes.coach import router as coach_router
from coach_relay.api.routes.health import router as health_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def describe_validation_error(errors: List[Dict[str, Any]]) -> str:
    """One message naming the first offending field ("Missing imageBase64")."""
    if not errors:
        return 'Invalid request'
    err = errors[0]
    loc = [str(part) for part in err.get('loc', ()) if part != 'body']
    missing = err.get('type') == 'missing'
    if not loc:
        return 'Missing request body' if missing else 'Request body must be a JSON object'
    field = '.'.join(loc)
    return f'Missing {field}' if missing else f'Invalid {field}'


def create_app(config: Optional[Settings] = None) -> FastAPI:
    config = config or get_settings()
    app = FastAPI(title=config.APP_NAME)

    @app.on_event('startup')
    def on_startup():
        logger.info("=" * 50)
        logger.info("Coach Relay Startup Diagnostics")
        logger.info("  .env path searched: %s (exists=%s)", ENV_FILE, ENV_FILE.exists())
        logger.info("  GROQ_API_KEY present: %s", bool(config.GROQ_API_KEY))
        logger.info("  GROQ_API_KEY length:  %d", len(config.GROQ_API_KEY))
        logger.info("  GROQ_MODEL: %s", config.GROQ_MODEL)
        logger.info("  GROQ_VISION_MODEL: %s", config.GROQ_VISION_MODEL)
        logger.info("  PID: %d", os.getpid())
        client = get_completion_client()
        logger.info("  Selected client: %s", client.__class__.__name__)
        logger.info("=" * 50)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message = describe_validation_error(exc.errors())
        logger.info("Rejected %s %s — %s", request.method, request.url.path, message)
        return JSONResponse(status_code=400, content={'error': message})

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=config.MAX_BODY_BYTES)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    app.include_router(health_router)
    app.include_router(coach_router)
    return app


app = create_app()
