from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from easyapply.config import BatchSettings, BrowserSettings
from easyapply.models.profile import Profile


@pytest.fixture()
def isolated_db(monkeypatch, tmp_path):
    """
    Create an isolated sqlite database for API/narration integration tests.
    """
    from easyapply import app as app_module
    from easyapply.core import narration as narration_module
    from easyapply.db import database as db_module
    from easyapply.db.database import Base

    db_file = tmp_path / "test_easyapply.db"
    test_engine = create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine,
        expire_on_commit=False,
    )

    @contextmanager
    def testing_get_session():
        s = TestingSessionLocal()
        try:
            yield s
            s.commit()
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    # patch db module symbols
    monkeypatch.setattr(db_module, "engine", test_engine, raising=True)
    monkeypatch.setattr(db_module, "SessionLocal", TestingSessionLocal, raising=True)
    monkeypatch.setattr(db_module, "get_session", testing_get_session, raising=True)

    # patch modules that imported these symbols directly
    monkeypatch.setattr(app_module, "get_session", testing_get_session, raising=True)
    monkeypatch.setattr(narration_module, "get_session", testing_get_session, raising=True)

    # create tables after patching engine/session factory
    Base.metadata.create_all(bind=test_engine)
    return TestingSessionLocal


@pytest.fixture()
def resume_file(tmp_path) -> Path:
    path = tmp_path / "resume.pdf"
    path.write_bytes(b"%PDF-1.4 test resume")
    return path


@pytest.fixture()
def profile(resume_file) -> Profile:
    return Profile(
        first_name="Jane",
        last_name="Doe",
        email="jane@example.com",
        resume_file_path=str(resume_file),
        phone="+49 30 1234567",
        linkedin="https://www.linkedin.com/in/janedoe",
        github="https://github.com/janedoe",
        gender="Female",
        location="Germany",
    )


@pytest.fixture()
def settings(tmp_path) -> BatchSettings:
    """Runner settings with no real waiting and a CSV under tmp_path."""
    return BatchSettings(
        browser=BrowserSettings(headless=True),
        settle_ms=0,
        stability_timeout_ms=1000,
        stability_poll_ms=0,
        action_timeout_ms=100,
        post_submit_wait_ms=0,
        debug_fields=False,
        csv_path=tmp_path / "out" / "applied.csv",
    )


@pytest.fixture()
def captured_logs():
    """A log_fn that keeps (level, message) pairs, plus a matching log_factory."""
    lines: list[tuple[str, str]] = []

    def log_fn(message: str, level: str = "info") -> None:
        lines.append((level, message))

    def log_factory(_job_id=None):
        return log_fn

    log_fn.lines = lines
    log_fn.factory = log_factory
    return log_fn
