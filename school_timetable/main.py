import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from school_timetable.api.v1.time_slots.router import router as time_slots_router
from school_timetable.api.v1.timetables.router import router as timetables_router
from school_timetable.core.config import settings
from school_timetable.core.exceptions import ServiceError
from school_timetable.core.logging import configure_logging
from school_timetable.core.schemas import fail

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=fail(exc.code, exc.message))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return JSONResponse(
        status_code=exc.status_code,
        content=fail(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg', 'Invalid request')}" if location else first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=422,
        content=fail("VALIDATION_ERROR", message),
    )


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="School Timetable Service")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # One envelope for every outcome, success or error.
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    # Routers (time slots first: its fixed prefix must win over /timetables/{timetable_id})
    app.include_router(time_slots_router)
    app.include_router(timetables_router)

    logger.info("School timetable service configured (api v%s)", settings.api_version)
    return app


app = create_app()
