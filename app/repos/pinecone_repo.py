from pinecone import Pinecone
from typing import List, Dict

from app import config


class PineconeRepo:
    """
    Pinecone repository (read side)
    - Vectors + chunk text + metadata are written by ingestion
    - Namespace is STRICTLY the repository namespace
    """

    def __init__(self, index=None):
        if index is not None:
            self.index = index
            return

        api_key = config.PINECONE_API_KEY
        host = config.PINECONE_HOST

        if not api_key or not host:
            raise RuntimeError("PINECONE_API_KEY or PINECONE_HOST not set")

        self.pc = Pinecone(api_key=api_key)
        self.index = self.pc.Index(host=host)

    # --------------------------------------------------
    # Query (REPOSITORY namespace only)
    # --------------------------------------------------
    def query(
        self,
        *,
        namespace: str,
        vector: List[float],
        top_k: int = 8,
    ):
        """
        Similarity query restricted to one namespace.
        Matches come back highest score first.
        """

        if not namespace:
            raise ValueError("namespace is required")

        return self.index.query(
            vector=vector,
            top_k=top_k,
            namespace=namespace,
            include_metadata=True,
        )

    # --------------------------------------------------
    # Inspection
    # --------------------------------------------------
    def list_namespaces(self) -> Dict[str, int]:
        stats = self.index.describe_index_stats()
        namespaces = stats.get("namespaces", {}) or {}

        counts = {}
        for ns, meta in namespaces.items():
            count = meta.get("vector_count") if isinstance(meta, dict) else getattr(meta, "vector_count", None)
            counts[ns] = count or 0
        return counts

    def list_vector_ids(self, namespace: str, limit: int = 5) -> List[str]:
        # Pinecone list_paginated limit must be < 100
        page_size = min(max(limit, 1), 99)

        resp = self.index.list_paginated(namespace=namespace, limit=page_size)

        vectors = getattr(resp, "vectors", None) or (resp.get("vectors", []) if isinstance(resp, dict) else [])
        ids = []

        for v in vectors:
            if isinstance(v, dict) and "id" in v:
                ids.append(v["id"])
            else:
                vid = getattr(v, "id", None)
                if vid:
                    ids.append(vid)

        return ids[:limit]

    # --------------------------------------------------
    # Health check
    # --------------------------------------------------
    def health(self) -> bool:
        try:
            self.index.describe_index_stats()
            return True
        except Exception:
            return False
