"""
Tests de configuración: la base de datos usa la URL de Settings.
"""

import os

from process_diagram_core.config import get_settings
from process_diagram_core.db import database


def test_engine_uses_settings_database_url():
    settings = get_settings()

    assert settings.database_url == os.environ["DATABASE_URL"]
    assert database.DATABASE_URL == settings.database_url
    assert str(database.get_db_engine().url) == settings.database_url
