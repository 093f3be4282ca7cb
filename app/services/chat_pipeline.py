# app/services/chat_pipeline.py
import logging
from enum import Enum
from typing import Any, AsyncIterator, Callable, List

from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, StreamingResponse
from langchain_core.documents import Document
from pydantic import ValidationError

from app.config import RETRIEVAL_TOP_K
from app.errors import BadRequest, ChatError, UpstreamError
from app.repos.firestore_repo import get_settings_repo
from app.repos.pinecone_repo import PineconeRepo
from app.schemas.chat import ChatRequest, ErrorResponse
from app.services.completion import CompletionInvoker, build_chat_model
from app.services.prompt import assemble
from app.services.resolver import resolve
from app.services.retriever import NamespaceRetriever, build_embeddings

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    RECEIVED = "received"
    RESOLVED = "resolved"
    RETRIEVED = "retrieved"
    ASSEMBLED = "assembled"
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"


# --------------------------------------------------
# Per-request collaborators (built with the resolved key)
# --------------------------------------------------
def default_retriever(api_key: str) -> NamespaceRetriever:
    return NamespaceRetriever(
        embeddings=build_embeddings(api_key),
        pinecone=PineconeRepo(),
    )


def default_invoker(api_key: str) -> CompletionInvoker:
    return CompletionInvoker(build_chat_model(api_key))


# --------------------------------------------------
# Received
# --------------------------------------------------
def parse_request(payload: Any) -> ChatRequest:
    if not isinstance(payload, dict):
        raise BadRequest("Request body must be a JSON object")

    try:
        return ChatRequest.model_validate(payload)
    except ValidationError as e:
        errors = [
            {
                "loc": ".".join(str(part) for part in err["loc"]),
                "msg": err["msg"],
            }
            for err in e.errors()
        ]
        fields = sorted({err["loc"].split(".")[0] for err in errors})
        raise BadRequest(
            f"Invalid request: check {', '.join(fields)}",
            details={"errors": errors},
        ) from e


class ChatPipeline:
    """
    One chat request, five stages, strictly in order:

        received → resolved → retrieved → assembled → streaming → done

    Any failure exits to `failed` and is turned into a single JSON
    error response here. Nothing is retried.
    """

    def __init__(
        self,
        *,
        settings_repo=None,
        retriever_factory: Callable[[str], NamespaceRetriever] = default_retriever,
        invoker_factory: Callable[[str], CompletionInvoker] = default_invoker,
        top_k: int = RETRIEVAL_TOP_K,
    ):
        self.settings_repo = settings_repo if settings_repo is not None else get_settings_repo()
        self.retriever_factory = retriever_factory
        self.invoker_factory = invoker_factory
        self.top_k = top_k

    async def run(self, payload: Any):
        stage = Stage.RECEIVED

        try:
            request = parse_request(payload)
            logger.info(
                "chat stage=%s repository_id=%s messages=%d",
                stage.value,
                request.selectedRepoId,
                len(request.messages),
            )

            stage = Stage.RESOLVED
            # Settings store client is blocking
            credential, repository = await run_in_threadpool(
                resolve, self.settings_repo, request.selectedRepoId
            )

            stage = Stage.RETRIEVED
            retriever = self.retriever_factory(credential.apiKey)
            docs = await self._retrieve(retriever, request.question, repository.namespace)

            stage = Stage.ASSEMBLED
            prompt = assemble(docs, request.history, request.question)
            logger.info(
                "chat stage=%s documents=%d history=%d prompt_chars=%d",
                stage.value,
                len(docs),
                len(request.history),
                len(prompt),
            )

            stage = Stage.STREAMING
            invoker = self.invoker_factory(credential.apiKey)
            try:
                stream = await invoker.invoke(prompt)
            except Exception as e:
                raise UpstreamError.from_exception(e, service="completion") from e

        except UpstreamError as e:
            logger.exception(
                "chat upstream_error stage=%s service=%s",
                stage.value,
                e.details.get("service"),
            )
            return self._fail(e, stage)

        except ChatError as e:
            return self._fail(e, stage)

        except Exception as e:
            logger.exception("chat unexpected_error stage=%s", stage.value)
            return self._fail(ChatError(str(e) or "Internal server error"), stage)

        logger.info("chat stage=%s repository_id=%s", stage.value, repository.id)

        return StreamingResponse(
            self._track(stream, repository.id),
            status_code=200,
            media_type="text/plain",
        )

    # --------------------------------------------------
    # Retrieved
    # --------------------------------------------------
    async def _retrieve(
        self,
        retriever: NamespaceRetriever,
        question: str,
        namespace: str,
    ) -> List[Document]:
        try:
            vector = await retriever.embed(question)
        except Exception as e:
            raise UpstreamError.from_exception(e, service="embedding") from e

        try:
            return await retriever.search(vector, namespace, self.top_k)
        except Exception as e:
            raise UpstreamError.from_exception(e, service="vector_index") from e

    # --------------------------------------------------
    # Streaming → done
    # --------------------------------------------------
    async def _track(self, stream: AsyncIterator[str], repository_id: str) -> AsyncIterator[str]:
        try:
            async for fragment in stream:
                yield fragment
            logger.info("chat stage=%s repository_id=%s", Stage.DONE.value, repository_id)
        finally:
            await stream.aclose()

    # --------------------------------------------------
    # Failed
    # --------------------------------------------------
    def _fail(self, error: ChatError, stage: Stage) -> JSONResponse:
        logger.warning(
            "chat stage=%s at=%s status=%d error=%s",
            Stage.FAILED.value,
            stage.value,
            error.status_code,
            error.message,
        )
        body = ErrorResponse(**error.to_body(stage=stage.value))
        return JSONResponse(body.model_dump(), status_code=error.status_code)
