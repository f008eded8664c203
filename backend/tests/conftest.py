import json
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Ensure backend package is importable
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


class FakeCompletionClient:
    """Returns a canned completion (or raises) and records prompts."""

    def __init__(self, response="{}", error=None):
        self.response = response
        self.error = error
        self.prompts = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


class FakeRenderer:
    """Deterministic stand-in for the WeasyPrint renderer."""

    def __init__(self):
        self.calls = []
        self.error = None

    def render(self, document):
        self.calls.append(document)
        if self.error is not None:
            raise self.error
        body = json.dumps(document, sort_keys=True).encode("utf-8")
        return b"%PDF-1.4\n" + body + b"\n%%EOF\n"


@pytest.fixture
def fake_completion():
    return FakeCompletionClient()


@pytest.fixture
def fake_renderer():
    return FakeRenderer()


@pytest.fixture
def settings(tmp_path):
    from cvtailor.config import Settings  # type: ignore

    files_dir = tmp_path / "files"
    files_dir.mkdir(parents=True, exist_ok=True)
    return Settings(
        llm_api_key="",
        files_dir=str(files_dir),
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        cors_origins=["*"],
    )


@pytest.fixture
def client(tmp_path, monkeypatch, settings, fake_completion, fake_renderer):
    """Provide a FastAPI TestClient with an isolated SQLite DB, files dir and fake collaborators."""
    monkeypatch.setenv("FILES_DIR", settings.files_dir)
    monkeypatch.setenv("DATABASE_URL", settings.database_url)
    monkeypatch.setenv("CORS_ORIGINS", "*")
    # Avoid accidental usage of real API keys during tests
    monkeypatch.setenv("LLM_API_KEY", "")
    monkeypatch.setenv("GROQ_API_KEY", "")

    # Import app and DB after env is set
    from cvtailor import db  # type: ignore
    from cvtailor.config import get_settings  # type: ignore
    import cvtailor.models  # noqa: F401

    get_settings.cache_clear()

    engine = create_engine(settings.database_url, connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Ensure the app uses this engine when main.py imports it
    db.engine = engine  # type: ignore[attr-defined]
    db.Base.metadata.create_all(bind=engine)

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    from cvtailor.main import app  # type: ignore
    from cvtailor.api import deps  # type: ignore

    app.dependency_overrides[db.get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[deps.get_completion_client] = lambda: fake_completion
    app.dependency_overrides[deps.get_renderer] = lambda: fake_renderer

    yield TestClient(app)

    app.dependency_overrides.clear()
    engine.dispose()
