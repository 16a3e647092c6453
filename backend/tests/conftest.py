import json
import os
import sys
import tempfile
from pathlib import Path

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="intake-uploads-"))
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("ENVIRONMENT", "test")

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

import pytest
from fastapi.testclient import TestClient

from intake.db import Base
from intake.main import app
from intake.storage import StoredDocument, StoredDocuments

PDF_BYTES = b"%PDF-1.4 fake"


@pytest.fixture(autouse=True)
def clean_db():
    engine = app.state.database.engine
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def database():
    return app.state.database


@pytest.fixture
def upload_dir():
    path = Path(os.environ["UPLOAD_DIR"])
    for f in path.iterdir():
        f.unlink()
    return path


@pytest.fixture
def payload():
    return {
        "fullName": "Jane Doe",
        "dob": "2001-04-12",
        "gender": "Female",
        "mobile": "9876543210",
        "email": "jane@x.com",
        "currentCity": "Pune",
        "homeTown": "Nashik",
        "willingToRelocate": "Yes",
        "qualification": "B.Tech",
        "course": "Computer Science",
        "college": "COEP",
        "graduationYear": "2023",
        "marks": "95.456",
        "allSemCleared": "Yes",
        "hasInternship": "No",
        "preferredRole": "Backend Developer",
        "joining": "Immediate",
        "shifts": "Yes",
        "expectedCTC": "12.5",
        "source": "LinkedIn",
        "onlineTest": "Yes",
        "laptop": "Yes",
        "techSkills": ["Java"],
        "preferredLocations": ["Pune", "Remote"],
        "languages": ["English", "Marathi"],
    }


@pytest.fixture
def post_application(client):
    def _post(form, academics=False, resume=True):
        files = {}
        if resume:
            files["resume"] = ("my resume.pdf", PDF_BYTES, "application/pdf")
        if academics:
            files["academics"] = ("marksheet.pdf", PDF_BYTES, "application/pdf")
        return client.post("/upload", data={"data": json.dumps(form)}, files=files)
    return _post


class FakeStorage:
    """Records saves and deletes instead of touching disk or the network."""

    def __init__(self, fail_delete=False):
        self.saved = []
        self.deleted = []
        self.fail_delete = fail_delete

    async def save(self, document, base_url):
        stored = StoredDocument(field=document.field, url=f"{base_url}files/{document.filename}", key=document.filename)
        self.saved.append(stored)
        return stored

    async def delete(self, document):
        if self.fail_delete:
            raise RuntimeError("storage unreachable")
        self.deleted.append(document)


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
def failing_storage():
    return FakeStorage(fail_delete=True)


@pytest.fixture
def stored_documents():
    return StoredDocuments(
        resume=StoredDocument(field="resume", url="https://cdn.test/resume.pdf", key="resume"),
    )
