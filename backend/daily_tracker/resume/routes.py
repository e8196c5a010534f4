"""Resume analysis route."""

import logging

import anthropic
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from ..config import settings
from ..dependencies import get_cache, get_current_user_id
from ..integrations.anthropic_client import AIConfigurationError, analyze_resume
from ..integrations.cache import CacheService
from ..integrations.pdf import PdfExtractionError, extract_text
from ..rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["resume"])


@router.post("/resume/analyze")
@limiter.limit(settings.rate_limit_chat)
def analyze_resume_route(
    request: Request,
    resume: UploadFile | None = File(None),
    job_description: str = Form("", alias="jobDescription"),
    cache: CacheService = Depends(get_cache),
    user_id: str = Depends(get_current_user_id),
):
    if resume is None:
        return JSONResponse({"error": "No resume file uploaded"}, status_code=400)
    if not job_description.strip():
        return JSONResponse({"error": "Job description is required"}, status_code=400)
    if resume.content_type != "application/pdf":
        return JSONResponse({"error": "Only PDF files are allowed"}, status_code=400)

    data = resume.file.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        return JSONResponse({"error": "File too large"}, status_code=413)

    try:
        resume_text = extract_text(data)
    except PdfExtractionError as exc:
        logger.info("Resume PDF rejected for user=%s: %s", user_id, exc)
        return JSONResponse({"error": str(exc)}, status_code=400)

    try:
        result = analyze_resume(resume_text, job_description.strip(), cache)
    except AIConfigurationError as exc:
        logger.error("Resume analysis unavailable: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=500)
    except (anthropic.APIError, RuntimeError) as exc:
        logger.exception("Resume analysis failed for user=%s", user_id)
        return JSONResponse({"error": str(exc) or "Failed to analyze resume"}, status_code=500)

    logger.info("Resume analyzed for user=%s: score=%s", user_id, result.get("atsScore"))
    return result
