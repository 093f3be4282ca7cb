import json

from fastapi import APIRouter, Depends, Request

from app.config import API_PREFIX
from app.repos.firestore_repo import get_settings_repo
from app.services.chat_pipeline import ChatPipeline

router = APIRouter(prefix=API_PREFIX)

# One settings client per process; reads stay fresh per request
settings = get_settings_repo()


def get_chat_pipeline() -> ChatPipeline:
    # Fresh pipeline per request; only the store client is shared
    return ChatPipeline(settings_repo=settings)


# --------------------------------------------------
# Chat (streamed answer about one repository)
# --------------------------------------------------
@router.post("/chat")
async def chat(
    request: Request,
    pipeline: ChatPipeline = Depends(get_chat_pipeline),
):
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        payload = None  # → BadRequest inside the pipeline

    return await pipeline.run(payload)
