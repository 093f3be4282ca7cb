# app/services/resolver.py
import logging
from typing import Tuple

from app.errors import MissingCredential, RepositoryNotFound
from app.schemas.settings import Credential, RepositoryRecord

logger = logging.getLogger(__name__)


def resolve(settings_repo, repository_id: str) -> Tuple[Credential, RepositoryRecord]:
    """
    Look up the stored API key and the repository record.
    Read-only; both values are fetched fresh for every request.
    """

    api_key = settings_repo.get_stored_api_key()
    if not api_key:
        raise MissingCredential()

    repository = settings_repo.get_repository(repository_id)
    if repository is None:
        raise RepositoryNotFound(repository_id)

    logger.info(
        "resolved repository_id=%s namespace=%s",
        repository.id,
        repository.namespace,
    )
    return Credential(apiKey=api_key), repository
