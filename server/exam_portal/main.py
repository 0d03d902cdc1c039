import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from exam_portal.config import settings
from exam_portal.database import init_db
from exam_portal.errors import register_error_handlers
from exam_portal.logging_config import configure_logging
from exam_portal.routes import exam, student, teacher, upload

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Create uploads directory if it doesn't exist
os.makedirs(settings.upload_dir, exist_ok=True)

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
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=86400,
)

register_error_handlers(app)

# Mount static files for uploads
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup"""
    if settings.storage_backend == "sql":
        init_db()
    logger.info("%s is starting (storage: %s)", settings.app_name, settings.storage_backend)


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


app.include_router(exam.router, prefix="/api/exam", tags=["Exam"])
app.include_router(student.router, prefix="/api", tags=["Student"])
app.include_router(teacher.router, prefix="/api", tags=["Teacher"])
app.include_router(upload.router, prefix="/api", tags=["Upload"])
