"""
Fixtures compartidas.

La base de datos de los tests es un SQLite descartable: `DATABASE_URL` se fija
ANTES de importar `process_diagram_core.db.database`, que la lee al importarse.
"""

import os
import tempfile
import uuid

import pytest

_TEST_DB_DIR = tempfile.mkdtemp(prefix="process_diagram_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB_DIR}/test.sqlite"
os.environ["JWT_SECRET"] = ""

from process_diagram_core.db.database import get_db_session, init_db  # noqa: E402
from process_diagram_core.db.helpers import create_user  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _schema():
    init_db()


@pytest.fixture
def session():
    """Fixture que proporciona una sesión de base de datos para los tests.

    Usa get_db_session() que maneja commit/rollback automáticamente.
    """
    with get_db_session() as db_session:
        yield db_session


@pytest.fixture
def make_user(session):
    """Crea usuarios con email único: make_user("owner"), make_user("admin", role="admin")."""
    def _make(label: str = "user", role: str = "user"):
        unique_id = uuid.uuid4().hex[:8]
        user = create_user(
            session,
            email=f"{label}-{unique_id}@example.com",
            name=label.title(),
            role=role,
        )
        session.commit()
        return user
    return _make
