from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
import logging

from qrhunt import __version__
from qrhunt.api.deps import get_settings, reset_backend
from qrhunt.api.routes import router
from qrhunt.errors import AuthorizationError, ConfigurationError, StorageError

# Pick up a local .env for dev runs; real environment variables win.
load_dotenv(override=False)

app = FastAPI(title="qrhunt", version=__version__)
app.include_router(router)
logger = logging.getLogger(__name__)

# Seconds a client should wait before retrying after a store failure.
STORAGE_RETRY_AFTER_SEC = 2


@app.on_event("startup")
async def _startup() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    logger.info("qrhunt %s starting in %s mode", __version__, settings.mode.value)
    if not settings.signing_key:
        logger.warning("QRHUNT_SIGNING_KEY is not set; code creation and scanning will fail")


@app.on_event("shutdown")
async def _shutdown() -> None:
    reset_backend()


@app.exception_handler(AuthorizationError)
async def _authorization_error(request: Request, exc: AuthorizationError) -> JSONResponse:
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(ConfigurationError)
async def _configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Configuration error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(StorageError)
async def _storage_error(request: Request, exc: StorageError) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={"detail": str(exc), "retryable": True},
        headers={"Retry-After": str(STORAGE_RETRY_AFTER_SEC)},
    )
