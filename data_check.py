"""
Check what the vector index holds before chatting with a repository.

    python data_check.py              # list namespaces, then prompt for one
    python data_check.py <repo-id>    # first vector ids of that repository
"""
import sys

from dotenv import load_dotenv
from pinecone.exceptions import PineconeApiException

from app.repos.firestore_repo import get_settings_repo
from app.repos.pinecone_repo import PineconeRepo

load_dotenv()


def print_namespaces(pinecone: PineconeRepo) -> dict:
    namespaces = pinecone.list_namespaces()

    if not namespaces:
        print("No namespaces found (index may be empty).")
        return namespaces

    print("\n=== Available Namespaces ===")
    for ns, count in namespaces.items():
        print(f"- {ns!r} (vector_count={count})")

    return namespaces


def namespace_for(repository_id: str, settings_repo=None) -> str:
    # Fall back to the raw id when the store does not know the repository
    settings_repo = settings_repo or get_settings_repo()
    record = settings_repo.get_repository(repository_id)
    return record.namespace if record else repository_id


def print_top_ids(pinecone: PineconeRepo, namespace: str, top_n: int = 5) -> list:
    ids = pinecone.list_vector_ids(namespace, limit=top_n)

    print(f"\n=== Top {top_n} Vector IDs in Namespace {namespace!r} ===")
    if not ids:
        print("No vectors found in this namespace (or namespace doesn't exist).")
    else:
        for i, vid in enumerate(ids, start=1):
            print(f"{i}. {vid}")

    return ids


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    pinecone = PineconeRepo()

    if argv:
        repository_id = argv[0].strip()
    else:
        if not print_namespaces(pinecone):
            return 0
        repository_id = input("\nEnter repository id to print top 5 vector IDs: ").strip()

    if not repository_id:
        print("No repository id entered. Exiting.")
        return 1

    try:
        print_top_ids(pinecone, namespace_for(repository_id))
    except PineconeApiException as e:
        print(f"[ERROR] Pinecone API error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
