"""Chat assistant route with a per-session request quota."""

import logging

import anthropic
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..config import settings
from ..dependencies import get_current_user_id, get_quota
from ..integrations import anthropic_client
from ..integrations.anthropic_client import AIConfigurationError
from ..quota.service import QuotaCounter
from ..rate_limit import limiter
from .schemas import ChatRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post("/chat")
@limiter.limit(settings.rate_limit_chat)
def chat(
    request: Request,
    body: ChatRequest,
    quota: QuotaCounter = Depends(get_quota),
    user_id: str = Depends(get_current_user_id),
):
    limit = settings.chat_daily_limit
    used = quota.get(user_id)
    if used >= limit:
        logger.info("Chat quota exhausted for user=%s (%d/%d)", user_id, used, limit)
        return JSONResponse(
            {
                "error": (
                    f"Daily quota limit reached ({limit} requests). Your quota will reset when you "
                    "logout and login again, or when the server restarts."
                ),
                "quotaExceeded": True,
                "limit": limit,
                "used": used,
            },
            status_code=429,
        )

    try:
        reply = anthropic_client.chat([m.model_dump() for m in body.messages])
    except AIConfigurationError as exc:
        logger.error("Chat unavailable: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=500)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except anthropic.APIError as exc:
        logger.exception("Chat request failed for user=%s", user_id)
        return JSONResponse({"error": str(exc) or "Failed to get response"}, status_code=500)

    used = quota.increment(user_id)
    logger.debug("Chat quota for user=%s: %d/%d", user_id, used, limit)
    return {"message": reply, "quotaUsed": used, "quotaLimit": limit}
