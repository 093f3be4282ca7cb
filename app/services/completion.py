# app/services/completion.py
import logging
from typing import AsyncIterator, Optional

from langchain_core.messages import SystemMessage
from langchain_openai import ChatOpenAI

from app.config import CHAT_MODEL, REASONING_EFFORT, STREAM_ERROR_MARKER

logger = logging.getLogger(__name__)


def build_chat_model(api_key: str) -> ChatOpenAI:
    # Reasoning models take no temperature
    return ChatOpenAI(
        model=CHAT_MODEL,
        api_key=api_key,
        reasoning_effort=REASONING_EFFORT,
        streaming=True,
    )


def chunk_text(chunk) -> str:
    content = getattr(chunk, "content", chunk)

    if isinstance(content, str):
        return content

    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


async def _next_fragment(upstream) -> Optional[str]:
    """Next non-empty text fragment, None at end of stream."""
    while True:
        try:
            chunk = await upstream.__anext__()
        except StopAsyncIteration:
            return None

        text = chunk_text(chunk)
        if text:
            return text


class CompletionInvoker:
    """
    Streams a completion for one rendered prompt.

    invoke() waits for the FIRST fragment before returning, so a failing
    call raises here (and can still become a clean error response).
    Later failures only cut the stream short.
    """

    def __init__(self, llm, *, error_marker: str = STREAM_ERROR_MARKER):
        self.llm = llm
        self.error_marker = error_marker

    async def invoke(self, prompt: str) -> AsyncIterator[str]:
        upstream = self.llm.astream([SystemMessage(content=prompt)])

        try:
            first = await _next_fragment(upstream)
        except BaseException:
            await upstream.aclose()
            raise

        return self._relay(upstream, first)

    async def _relay(self, upstream, first: Optional[str]) -> AsyncIterator[str]:
        sent = 0
        try:
            if first is None:
                return

            yield first
            sent += 1

            while True:
                text = await _next_fragment(upstream)
                if text is None:
                    break
                yield text
                sent += 1

        except Exception as e:
            # Status line is already out; only the body can signal this
            logger.warning(
                "stream_truncated fragments=%d error=%s",
                sent,
                type(e).__name__,
                exc_info=True,
            )
            if self.error_marker:
                yield self.error_marker

        finally:
            # Runs on normal end, failure, and consumer disconnect
            await upstream.aclose()
            logger.info("stream_closed fragments=%d", sent)
