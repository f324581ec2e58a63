import logging
from typing import Mapping, Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException

from quiz_assistant.api.routes_analyze import router as analyze_router, utc_timestamp
from quiz_assistant.api.schemas import ErrorResponse
from quiz_assistant.core.config import get_settings
from quiz_assistant.core.errors import QuizAssistantError
from quiz_assistant.core.logging_utils import setup_logging

settings = get_settings()
setup_logging(settings.log_level, json_logs=settings.log_json)
logger = logging.getLogger(__name__)


class EmptyPreflightCORSMiddleware(CORSMiddleware):
    """Answers every preflight with an empty 200, keeping the CORS headers."""

    def preflight_response(self, request_headers: Headers) -> Response:
        resp = super().preflight_response(request_headers=request_headers)
        headers = {
            k: v for k, v in resp.headers.items() if k.lower() not in ("content-length", "content-type")
        }
        return Response(status_code=200, headers=headers)


app = FastAPI(title="Quiz Assistant (document-grounded)")

app.add_middleware(
    EmptyPreflightCORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str, headers: Optional[Mapping[str, str]] = None) -> JSONResponse:
    body = ErrorResponse(error=message, timestamp=utc_timestamp())
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


@app.exception_handler(QuizAssistantError)
async def quiz_error_handler(request: Request, exc: QuizAssistantError) -> JSONResponse:
    logger.error("%s: %s", exc.__class__.__name__, exc.message)
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
    logger.warning("Malformed request body: %s", ", ".join(fields))
    return error_response(400, "Richiesta non valida")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 405:
        return JSONResponse(
            status_code=405,
            content=ErrorResponse(error="Method not allowed").model_dump(exclude_none=True),
            headers=exc.headers,
        )
    return error_response(exc.status_code, str(exc.detail), headers=exc.headers)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error")
    return error_response(500, "Errore interno")


app.include_router(analyze_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.app_host, port=settings.app_port)
