# app/services/retriever.py
import logging
from typing import List

from fastapi.concurrency import run_in_threadpool
from langchain_core.documents import Document
from langchain_openai import OpenAIEmbeddings

from app.config import DOCUMENT_TEXT_KEY, EMBEDDING_MODEL, RETRIEVAL_TOP_K

logger = logging.getLogger(__name__)


def build_embeddings(api_key: str) -> OpenAIEmbeddings:
    # Must match the model used at ingestion time
    return OpenAIEmbeddings(model=EMBEDDING_MODEL, api_key=api_key)


class NamespaceRetriever:
    """
    Similarity search scoped to ONE repository namespace.

    The namespace is passed to the index query itself, so the top-k
    window only ever contains documents of that repository.
    """

    def __init__(self, *, embeddings, pinecone):
        self.embeddings = embeddings
        self.pinecone = pinecone

    async def embed(self, query: str) -> List[float]:
        return await self.embeddings.aembed_query(query)

    async def search(
        self,
        vector: List[float],
        namespace: str,
        k: int = RETRIEVAL_TOP_K,
    ) -> List[Document]:
        if not namespace:
            raise ValueError("namespace is required")

        # Pinecone client is blocking
        res = await run_in_threadpool(
            self.pinecone.query,
            namespace=namespace,
            vector=vector,
            top_k=k,
        )

        docs = []
        for m in res.matches or []:
            md = dict(m.metadata or {})
            text = md.pop(DOCUMENT_TEXT_KEY, None)

            if not text:
                continue

            md["id"] = m.id
            md["score"] = round(m.score, 4) if m.score is not None else None
            docs.append(Document(page_content=text, metadata=md))

        logger.info(
            "retrieved namespace=%s k=%d matches=%d documents=%d",
            namespace,
            k,
            len(res.matches or []),
            len(docs),
        )
        return docs

    async def retrieve(
        self,
        query: str,
        namespace: str,
        k: int = RETRIEVAL_TOP_K,
    ) -> List[Document]:
        """
        Returns up to k documents, highest relevance first.
        No matches → empty list (not an error).
        """
        vector = await self.embed(query)
        return await self.search(vector, namespace, k)
