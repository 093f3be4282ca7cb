# app/errors.py
from typing import Any, Dict, Optional


class ChatError(Exception):
    """
    Base failure of the chat pipeline.
    Converted ONCE (at the pipeline boundary) into:
        {"error": message, "details": {...}}
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = dict(details or {})

    def to_body(self, stage: Optional[str] = None) -> Dict[str, Any]:
        details = {"type": type(self).__name__, **self.details}
        if stage:
            details["stage"] = stage
        return {"error": self.message, "details": details}


# --------------------------------------------------
# Client errors
# --------------------------------------------------
class BadRequest(ChatError):
    status_code = 400


class PreconditionFailed(ChatError):
    status_code = 412


class MissingCredential(PreconditionFailed):
    def __init__(self):
        super().__init__("OpenAI API key is required")


class RepositoryNotFound(PreconditionFailed):
    status_code = 404

    def __init__(self, repository_id: str):
        super().__init__(
            "Repository not found",
            details={"repositoryId": repository_id},
        )


# --------------------------------------------------
# Upstream (embedding / vector index / completion)
# --------------------------------------------------
def upstream_status(exc: BaseException) -> Optional[int]:
    # openai → status_code, pinecone → status
    for attr in ("status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and 400 <= value <= 599:
            return value
    return None


class UpstreamError(ChatError):
    @classmethod
    def from_exception(cls, exc: BaseException, *, service: str) -> "UpstreamError":
        return cls(
            str(exc) or f"{service} call failed",
            status_code=upstream_status(exc) or 500,
            details={"service": service, "upstream": type(exc).__name__},
        )
