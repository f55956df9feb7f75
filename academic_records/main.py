import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from academic_records.api.v1.enrollments.router import router as enrollments_router
from academic_records.api.v1.marks.router import router as marks_router
from academic_records.api.v1.reports.router import router as reports_router
from academic_records.api.v1.students.router import router as students_router
from academic_records.api.v1.subjects.router import router as subjects_router
from academic_records.core.config import settings
from academic_records.core.logging import configure_logging

logger = logging.getLogger(__name__)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="Academic Records")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Routers. marks before enrollments: DELETE /enrollments/{id}/marks must not be
    # captured by DELETE /enrollments/{student_id}/{subject_id}.
    app.include_router(students_router)
    app.include_router(subjects_router)
    app.include_router(marks_router)
    app.include_router(enrollments_router)
    app.include_router(reports_router)

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
