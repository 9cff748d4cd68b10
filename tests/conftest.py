import os

# must be set before the package reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ADMIN_USER_IDS"] = "admin-1"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from driver_onboarding.db import SessionLocal, engine, init_db
from driver_onboarding.deps import get_document_store
from driver_onboarding.main import app
from driver_onboarding.models import Base
from driver_onboarding.services.documents import DocumentStore
from driver_onboarding.services.storage import LocalDocumentStorage
from driver_onboarding.utils.security import create_access_token

PDF = b"%PDF-1.4\n%test document\n"
PNG = b"\x89PNG\r\n\x1a\nfake-image"

APPLICATION = {
    "license_number": "DL-2291-77",
    "timezone": "Europe/Berlin",
    "phone_number": "+4915112345678",
    "experience_years": 6,
    "full_name": "Alex Weber",
}

VEHICLE = {
    "name": "Work van",
    "type": "van",
    "plate_number": "b-ab 1234",
    "manufacture_year": 2019,
    "model": "Sprinter",
    "color": "white",
    "max_weight": 1000,
    "max_volume": 10,
    "max_packages": 50,
}

DOCUMENT_TYPES = ["license", "identity", "insurance", "vehicle_registration"]


@pytest.fixture(autouse=True)
def fresh_db():
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage_dir(tmp_path):
    path = tmp_path / "documents"
    path.mkdir()
    return path


@pytest.fixture
def store(storage_dir):
    return DocumentStore(
        storage=LocalDocumentStorage(storage_dir),
        max_bytes=1024,
        content_types={"image/jpeg", "image/png", "application/pdf"},
    )


@pytest.fixture
def client(store):
    app.dependency_overrides[get_document_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth(user_id="user-1", role="user"):
    return {"Authorization": f"Bearer {create_access_token(user_id, role=role)}"}


@pytest.fixture
def admin_headers():
    return auth("admin-1")


def stored_files(path):
    return [p for p in path.rglob("*") if p.is_file()]
