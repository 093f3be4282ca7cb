from types import SimpleNamespace

import data_check
from app.repos.firestore_repo import InMemorySettingsRepo
from app.repos.pinecone_repo import PineconeRepo


class InspectIndex:
    def __init__(self, namespaces, ids):
        self.namespaces = namespaces
        self.ids = ids
        self.listed = []

    def describe_index_stats(self):
        return {"namespaces": self.namespaces}

    def list_paginated(self, namespace, limit):
        self.listed.append((namespace, limit))
        return SimpleNamespace(vectors=[{"id": i} for i in self.ids.get(namespace, [])][:limit])


def test_list_namespaces_counts():
    repo = PineconeRepo(index=InspectIndex({"R1": {"vector_count": 12}, "R2": {}}, {}))

    assert repo.list_namespaces() == {"R1": 12, "R2": 0}


def test_list_vector_ids_caps_page_size():
    index = InspectIndex({}, {"R1": ["a", "b", "c"]})
    repo = PineconeRepo(index=index)

    assert repo.list_vector_ids("R1", limit=2) == ["a", "b"]
    assert repo.list_vector_ids("R1", limit=500) == ["a", "b", "c"]
    assert index.listed[-1] == ("R1", 99)


def test_namespace_for_uses_settings_store():
    settings = InMemorySettingsRepo(repositories={"R1": {"namespace": "ns-1"}})

    assert data_check.namespace_for("R1", settings) == "ns-1"
    assert data_check.namespace_for("unknown", settings) == "unknown"


def test_main_prints_ids_for_repository(monkeypatch, capsys):
    index = InspectIndex({"R1": {"vector_count": 2}}, {"R1": ["chunk_1", "chunk_2"]})
    monkeypatch.setattr(data_check, "PineconeRepo", lambda: PineconeRepo(index=index))
    monkeypatch.setattr(data_check, "get_settings_repo", lambda: InMemorySettingsRepo(repositories={"R1": {}}))

    assert data_check.main(["R1"]) == 0

    out = capsys.readouterr().out
    assert "1. chunk_1" in out
    assert "2. chunk_2" in out


def test_main_empty_index(monkeypatch, capsys):
    monkeypatch.setattr(data_check, "PineconeRepo", lambda: PineconeRepo(index=InspectIndex({}, {})))

    assert data_check.main([]) == 0
    assert "No namespaces found" in capsys.readouterr().out


def test_index_health_disabled_without_settings(monkeypatch):
    from fastapi.testclient import TestClient
    from app.main import app

    monkeypatch.setattr("app.config.PINECONE_API_KEY", None)
    monkeypatch.setattr("app.config.PINECONE_HOST", None)

    resp = TestClient(app).get("/health/index")

    assert resp.status_code == 200
    assert resp.json()["status"] == "disabled"
