import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from clipapi.core.config import CORS_ORIGINS, HOST, LOG_LEVEL, PORT, ensure_dirs
from clipapi.core.errors import ClipError, ClipInputError
from clipapi.schemas.clips import ClipRequest, ClipResponse, ErrorResponse
from clipapi.services.clipper import process_clip

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

INPUT_ERROR = "URL, startTime and endTime are required"


@asynccontextmanager
async def lifespan(_app: FastAPI):
    ensure_dirs()
    yield


app = FastAPI(
    title="Clip API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, error: str, details=None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(RequestValidationError)
async def validation_error(_request: Request, exc: RequestValidationError):
    # absent body reports loc ("body",), a bad field ("body", "<name>")
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    return _error(400, INPUT_ERROR, ", ".join(fields) or None)


# =========================
# ENDPOINTS
# =========================

@app.post("/api/clip")
def api_clip(req: ClipRequest):
    try:
        final_path = process_clip(req)
    except ClipInputError as e:
        return _error(400, str(e), ", ".join(e.ctx.get("missing", [])) or None)
    except ClipError as e:
        logger.error("Error processing video section (%s): %s", e.code.value, e)
        return _error(500, "Failed to process video section", str(e))
    except Exception as e:
        logger.exception("Unexpected error processing video section")
        return _error(500, "Failed to process video section", str(e) or "Unknown error")

    return ClipResponse(file_path=final_path).model_dump(by_alias=True)


@app.get("/health")
def health():
    return {"status": "ok"}


def main():
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    main()
