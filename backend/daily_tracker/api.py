"""API router: all JSON endpoints under the /api prefix."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from .auth.routes import router as auth_router
from .chat.routes import router as chat_router
from .config import settings
from .drive.routes import router as drive_router
from .integrations.email import email_diagnostics
from .jobs.routes import router as jobs_router
from .notes.routes import router as notes_router
from .records import utcnow
from .resume.routes import router as resume_router
from .tasks.routes import router as tasks_router

api_router = APIRouter(prefix="/api")

api_router.include_router(auth_router)
api_router.include_router(jobs_router)
api_router.include_router(tasks_router)
api_router.include_router(notes_router)
api_router.include_router(drive_router)
api_router.include_router(resume_router)
api_router.include_router(chat_router)


@api_router.get("/diagnostic/email-config", tags=["diagnostics"])
def email_config():
    if settings.is_production:
        return JSONResponse({"error": "Diagnostic endpoints are disabled in production"}, status_code=403)
    diagnostics = email_diagnostics()
    ok = not diagnostics["issues"]
    return {
        "status": "OK" if ok else "NEEDS_CONFIGURATION",
        "message": "Email configuration is complete" if ok else "Email configuration needs attention",
        "diagnostics": {
            "timestamp": utcnow().isoformat(),
            "environment": settings.environment,
            **diagnostics,
        },
    }
