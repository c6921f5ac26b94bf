"""Capa de persistencia (SQLAlchemy): engine, sesiones, modelos y helpers."""
