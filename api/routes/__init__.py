"""Rutas de la API."""

from . import catalog, collaborators, comments, process_versions, processes

__all__ = ["catalog", "collaborators", "comments", "process_versions", "processes"]
