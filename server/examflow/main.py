import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from examflow.config import settings
from examflow.database import init_db
from examflow.errors import Conflict, ExamError, InvalidInput, NotFound

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    NotFound: 404,
    InvalidInput: 400,
    Conflict: 409,
}

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def status_code_for(exc: ExamError) -> int:
    for kind, code in ERROR_STATUS_CODES.items():
        if isinstance(exc, kind):
            return code
    return 500


@app.exception_handler(ExamError)
async def exam_error_handler(request: Request, exc: ExamError):
    status_code = status_code_for(exc)
    logger.warning("%s %s -> %d %s: %s", request.method, request.url.path, status_code, type(exc).__name__, exc.message)
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.on_event("startup")
async def startup_event():
    """Create tables on startup"""
    init_db()
    logger.info("%s %s is starting (database: %s)", settings.app_name, settings.api_version, settings.database_url)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.api_version,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


# Import and include routers
from examflow.routes import exams, questions, results, students  # noqa: E402

app.include_router(exams.router, prefix="/api/exams", tags=["Exams"])
app.include_router(results.router, prefix="/api/results", tags=["Results"])
app.include_router(questions.router, prefix="/api/questions", tags=["Questions"])
app.include_router(students.router, prefix="/api/students", tags=["Students"])


def run():
    import uvicorn

    uvicorn.run("examflow.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    run()
