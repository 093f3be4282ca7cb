# app/repos/firestore_repo.py
import logging
import os
from google.cloud import firestore
from google.auth.exceptions import DefaultCredentialsError
from typing import Optional, Dict

from app.schemas.settings import RepositoryRecord

logger = logging.getLogger(__name__)

SETTINGS_COLLECTION = "storeSettings"
REPOSITORIES_COLLECTION = "repositories"


def _to_record(repository_id: str, data: Dict) -> RepositoryRecord:
    # Ingestion tags documents with the repository id unless told otherwise
    return RepositoryRecord(
        id=repository_id,
        namespace=data.get("namespace") or repository_id,
    )


class FirestoreSettingsRepo:
    """
    Read-only view of the settings store:
    - storeSettings/<first doc>.openAiKey → API key
    - repositories/<id>                    → repository record
    Reads are fresh on every call (no caching).
    """

    def __init__(self, project: Optional[str] = None):
        self._db = None

        project = project or os.getenv("FIRESTORE_PROJECT")

        if not project:
            logger.info("firestore_disabled reason=no_project")
            return

        try:
            self._db = firestore.Client(project=project)
        except DefaultCredentialsError as e:
            logger.warning("firestore_disabled reason=credentials error=%s", e)
            self._db = None

    def enabled(self) -> bool:
        return self._db is not None

    # ---------------------------------------------------
    # Credential
    # ---------------------------------------------------
    def get_stored_api_key(self) -> Optional[str]:
        if not self._db:
            return None

        for doc in self._db.collection(SETTINGS_COLLECTION).limit(1).stream():
            key = (doc.to_dict() or {}).get("openAiKey")
            return key or None

        return None

    # ---------------------------------------------------
    # Repository
    # ---------------------------------------------------
    def get_repository(self, repository_id: str) -> Optional[RepositoryRecord]:
        if not self._db:
            return None

        doc = self._db.collection(REPOSITORIES_COLLECTION).document(repository_id).get()

        if not doc.exists:
            return None

        return _to_record(repository_id, doc.to_dict() or {})


# -------------------------------------------------
# In-memory store (LOCAL DEV / TESTS)
# -------------------------------------------------
class InMemorySettingsRepo:
    def __init__(
        self,
        api_key: Optional[str] = None,
        repositories: Optional[Dict[str, Dict]] = None,
    ):
        self.api_key = api_key
        self.repositories = dict(repositories or {})

    def enabled(self) -> bool:
        return True

    def get_stored_api_key(self) -> Optional[str]:
        return self.api_key or None

    def get_repository(self, repository_id: str) -> Optional[RepositoryRecord]:
        data = self.repositories.get(repository_id)
        if data is None:
            return None
        return _to_record(repository_id, data)


# -------------------------------------------------
# Factory
# -------------------------------------------------
def get_settings_repo():
    if os.getenv("FIRESTORE_PROJECT"):
        return FirestoreSettingsRepo()

    # LOCAL_REPOSITORIES="repo-a,repo-b" → namespace == id
    local_ids = [r.strip() for r in os.getenv("LOCAL_REPOSITORIES", "").split(",")]
    return InMemorySettingsRepo(
        api_key=os.getenv("OPENAI_API_KEY"),
        repositories={rid: {} for rid in local_ids if rid},
    )
