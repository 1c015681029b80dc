import pytest
from fastapi.testclient import TestClient

import crm.main
from crm.core.db import get_db, get_document_files, get_profile_picture_files
from crm.db.datastore import JsonDocumentStore
from crm.db.files import FileStorage
from crm.main import app


@pytest.fixture
def store(tmp_path):
    return JsonDocumentStore(tmp_path / "data.json")


@pytest.fixture
def document_files(tmp_path):
    return FileStorage(tmp_path / "documents")


@pytest.fixture
def picture_files(tmp_path):
    return FileStorage(tmp_path / "profile-pictures")


@pytest.fixture
def client(store, document_files, picture_files, monkeypatch):
    """API client bound to a fresh data file"""
    monkeypatch.setattr(crm.main, "store", store)
    app.dependency_overrides[get_db] = lambda: store
    app.dependency_overrides[get_document_files] = lambda: document_files
    app.dependency_overrides[get_profile_picture_files] = lambda: picture_files
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
