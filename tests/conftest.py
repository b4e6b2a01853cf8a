import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from sqlalchemy import func, select, table
from sqlalchemy.orm import sessionmaker

from db.session import build_engine


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'store.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    from fastapi.testclient import TestClient

    from db.deps import get_db
    from main import app

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def count_rows(db, table_name: str) -> int:
    value = db.execute(select(func.count()).select_from(table(table_name))).scalar_one()
    db.commit()
    return value


def stale_table_exists(monkeypatch, module, *stale_names):
    """Make the first existence check for each name in `module` answer False."""
    real = module.table_exists
    pending = set(stale_names)

    def table_exists_once_stale(db, table_name):
        if table_name in pending:
            pending.discard(table_name)
            return False
        return real(db, table_name)

    monkeypatch.setattr(module, "table_exists", table_exists_once_stale)
