import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from madking import __version__
from madking.modules import register_all
from madking.modules.rules_pkg.errors import CharacterSheetError, DuplicateKey, NotFound
from madking.shared import field_errors

# Initialize Logging
logging.basicConfig(
    level=os.environ.get("MADKING_LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s [%(levelname)s] [%(name)s] %(message)s',
)
logger = logging.getLogger("madking.api")

app = FastAPI(title="Mad King RPG Character Sheet API", version=__version__)

STATUS_BY_KIND = {
    NotFound.kind: 404,
    DuplicateKey.kind: 409,
}


# --- Error mapping ---
@app.exception_handler(CharacterSheetError)
async def character_sheet_error_handler(request: Request, exc: CharacterSheetError):
    status_code = STATUS_BY_KIND.get(exc.kind, 400)
    logger.warning(f"{request.method} {request.url.path} -> {status_code} {exc.kind}: {exc.message}")
    return JSONResponse(status_code=status_code, content={"success": False, **exc.to_dict()})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = field_errors(exc.errors())
    logger.warning(f"{request.method} {request.url.path} -> 400 ValidationError: {errors}")
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "kind": "ValidationError",
            "message": "Validation failed",
            "field_errors": errors,
        },
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "kind": "InternalError", "message": "Server error"},
    )


# --- Routes ---
register_all(app)


@app.get("/", tags=["Meta"])
def index():
    return {
        "message": "Mad King RPG Character Sheet API",
        "version": __version__,
        "endpoints": {
            "characters": "/characters",
            "races": "/races",
            "classes": "/classes",
            "origins": "/origins",
            "items": "/items",
            "spells": "/spells",
            "health": "/health",
        },
    }


@app.get("/health", tags=["Meta"])
def health_check():
    return {"status": "ok", "service": "madking-api"}
