from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.logging import configure_logging
from app.endpoints import auth, content, enrollment, programs, progress
from app.middleware.exceptions import global_exception_handler, http_exception_handler, validation_exception_handler
from app.middleware.logging import RequestLoggingMiddleware
from app.models import all_models  # noqa: F401

configure_logging()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

if settings.STORAGE_BACKEND == "local":
    app.mount("/files", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="files")

app.include_router(auth.router, prefix="/auth", tags=["Auth"])
# Content routes go first so /programs/modules/... is not captured by /programs/{program_id}.
app.include_router(content.router, prefix=f"{settings.API_PREFIX}/programs", tags=["Program Content"])
app.include_router(programs.router, prefix=f"{settings.API_PREFIX}/programs", tags=["Programs"])
app.include_router(enrollment.router, prefix=settings.API_PREFIX, tags=["Enrollments"])
app.include_router(progress.router, prefix=f"{settings.API_PREFIX}/progress", tags=["Progress"])


@app.get("/health", tags=["Health"])
def health_check():
    return {"status": "ok", "service": settings.PROJECT_NAME, "version": settings.VERSION}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
