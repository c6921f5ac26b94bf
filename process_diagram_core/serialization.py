"""
Codec JSON de diagramas.

Formato persistido de un snapshot (lo que produce la generación con IA y lo
que consumen los exportadores PNG/SVG/PDF):

    {"nodes": [...], "edges": [...], "viewport": {"x": 0, "y": 0, "zoom": 1}}

Formato de exportación de un documento completo (descarga/subida de archivo):

    {
      "version": "1.0",
      "title": "...",
      "description": "...",
      "nodes": [...],
      "edges": [...],
      "viewport": {...},
      "metadata": {"createdAt": "...", "author": "..."}
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from .domain_models import GraphSnapshot
from .exceptions import InvalidDocumentError
from .graph_store import GraphStore

EXPORT_FORMAT_VERSION = "1.0"


@dataclass
class ProcessExport:
    """Documento exportado/importado."""
    title: str
    snapshot: GraphSnapshot
    description: Optional[str] = None
    version: str = EXPORT_FORMAT_VERSION
    metadata: Dict[str, Any] = field(default_factory=dict)


def dump_snapshot(snapshot: GraphSnapshot) -> str:
    """Serializa un snapshot al formato persistido."""
    return json.dumps(snapshot.to_dict(), ensure_ascii=False)


def load_snapshot(raw: str | Dict[str, Any] | None) -> GraphSnapshot:
    """
    Parsea un snapshot persistido (string JSON o dict ya decodificado).

    Raises:
        InvalidDocumentError: Si el JSON es inválido o no tiene la forma esperada.
    """
    if raw is None or raw == "":
        return GraphSnapshot()
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidDocumentError(f"JSON inválido: {e}") from e
    return GraphSnapshot.from_dict(raw)


def export_json(
    title: str,
    snapshot: GraphSnapshot,
    description: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> str:
    """Exporta un documento a JSON (ver formato en el docstring del módulo)."""
    meta = dict(metadata or {})
    meta.setdefault("createdAt", datetime.utcnow().isoformat())
    payload: Dict[str, Any] = {
        "version": EXPORT_FORMAT_VERSION,
        "title": title,
    }
    if description is not None:
        payload["description"] = description
    payload.update(snapshot.to_dict())
    payload["metadata"] = meta
    return json.dumps(payload, ensure_ascii=False, indent=2)


def import_json(raw: str) -> ProcessExport:
    """
    Importa un documento exportado.

    Además de la forma del JSON, verifica la integridad del grafo (ids únicos,
    conexiones con extremos existentes) con las mismas reglas que
    `GraphStore.replace_all`, de modo que nunca se acepta un grafo a medias.

    Raises:
        InvalidDocumentError: JSON inválido o sin `nodes` / `edges`.
        DuplicateIdError / DanglingReferenceError: Grafo inconsistente.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidDocumentError(f"JSON inválido: {e}") from e

    if not isinstance(data, dict):
        raise InvalidDocumentError("El documento importado debe ser un objeto JSON")
    if not isinstance(data.get("nodes"), list):
        raise InvalidDocumentError("Documento inválido: falta la lista 'nodes'")
    if not isinstance(data.get("edges"), list):
        raise InvalidDocumentError("Documento inválido: falta la lista 'edges'")

    snapshot = GraphSnapshot.from_dict(data)
    GraphStore(snapshot.nodes, snapshot.edges)

    return ProcessExport(
        title=data.get("title") or "Imported Process",
        description=data.get("description"),
        snapshot=snapshot,
        version=data.get("version") or EXPORT_FORMAT_VERSION,
        metadata=data.get("metadata") or {},
    )
