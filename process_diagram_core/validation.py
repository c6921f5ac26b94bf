"""
Validación estructural de un diagrama de procesos.

`validate_process(nodes, edges)` es una función pura: no modifica su entrada,
no tiene efectos secundarios y siempre evalúa TODAS las reglas (no corta en la
primera falla). El resultado es un `ValidationReport`, nunca una excepción.

Reglas
------
Errores (hacen que `is_valid` sea False):
- MISSING_START: no hay ningún bloque de inicio (start / entry_point).
- MISSING_END: no hay ningún bloque de fin (end / exit_point).
- MISSING_NAME: un bloque tiene nombre vacío o solo espacios.

Advertencias (nunca afectan `is_valid`):
- MULTIPLE_START: hay más de un bloque de inicio.
- INCOMPLETE_DECISION: un bloque de decisión tiene menos de 2 salidas.
- NO_OUTPUTS: el bloque declara manejador de salida, no es de fin y no tiene
  salidas.
- NO_INPUTS: el bloque declara manejador de entrada, no es de inicio y no tiene
  entradas.
- ISOLATED_NODE: bloque intermedio sin ninguna conexión. Un bloque aislado
  reporta solo esta advertencia; NO_OUTPUTS / NO_INPUTS quedan para bloques
  que tienen alguna conexión pero les falta un lado.
- DUPLICATE_NAME: dos o más bloques comparten exactamente el mismo nombre.

La validación es a demanda: el grafo puede estar en un estado inválido
mientras se edita, y guardar no depende de que sea válido.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Literal, Optional

from .blocks import DECISION_TYPES, END_TYPES, START_TYPES, get_block_meta
from .domain_models import Edge, Node

Severity = Literal["error", "warning"]

MISSING_START = "MISSING_START"
MULTIPLE_START = "MULTIPLE_START"
MISSING_END = "MISSING_END"
MISSING_NAME = "MISSING_NAME"
INCOMPLETE_DECISION = "INCOMPLETE_DECISION"
NO_OUTPUTS = "NO_OUTPUTS"
NO_INPUTS = "NO_INPUTS"
ISOLATED_NODE = "ISOLATED_NODE"
DUPLICATE_NAME = "DUPLICATE_NAME"


@dataclass(frozen=True)
class ValidationIssue:
    """
    Un hallazgo de la validación.

    Attributes:
        severity: "error" | "warning".
        code: Código estable (MISSING_START, ISOLATED_NODE, ...).
        message: Mensaje legible.
        node_id: Nodo afectado, si la regla es por nodo.
    """
    severity: Severity
    code: str
    message: str
    node_id: Optional[str] = None

    def to_dict(self) -> dict:
        out = {"severity": self.severity, "code": self.code, "message": self.message}
        if self.node_id is not None:
            out["nodeId"] = self.node_id
        return out


@dataclass
class ValidationReport:
    """Resultado estructurado y no fatal de `validate_process`."""
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def issues(self) -> list[ValidationIssue]:
        return [*self.errors, *self.warnings]

    def codes(self) -> list[tuple[str, Optional[str]]]:
        """Pares (código, node_id) en orden; cómodo para tests y logs."""
        return [(issue.code, issue.node_id) for issue in self.issues]

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }

    def _error(self, code: str, message: str, node_id: Optional[str] = None) -> None:
        self.errors.append(ValidationIssue("error", code, message, node_id))

    def _warning(self, code: str, message: str, node_id: Optional[str] = None) -> None:
        self.warnings.append(ValidationIssue("warning", code, message, node_id))


def validate_process(nodes: Iterable[Node], edges: Iterable[Edge]) -> ValidationReport:
    """
    Valida un par (nodos, conexiones).

    Args:
        nodes: Nodos del diagrama (no se modifican).
        edges: Conexiones del diagrama (no se modifican).

    Returns:
        ValidationReport con errores y advertencias.
    """
    nodes = list(nodes)
    edges = list(edges)
    report = ValidationReport()

    out_degree = Counter(e.source for e in edges)
    in_degree = Counter(e.target for e in edges)

    # 1-2) Inicio
    start_nodes = [n for n in nodes if n.type in START_TYPES]
    if not start_nodes:
        report._error(MISSING_START, "El proceso debe tener un bloque de inicio")
    elif len(start_nodes) > 1:
        report._warning(MULTIPLE_START, f"El proceso tiene {len(start_nodes)} bloques de inicio")

    # 3) Fin
    if not any(n.type in END_TYPES for n in nodes):
        report._error(MISSING_END, "El proceso debe tener un bloque de fin")

    for node in nodes:
        label = node.data.name or node.id
        is_start = node.type in START_TYPES
        is_end = node.type in END_TYPES
        outputs = out_degree[node.id]
        inputs = in_degree[node.id]

        # 4) Nombre
        if not node.data.name or not node.data.name.strip():
            report._error(MISSING_NAME, "El bloque debe tener un nombre", node.id)

        # 5) Decisiones
        if node.type in DECISION_TYPES and outputs < 2:
            report._warning(
                INCOMPLETE_DECISION,
                f'El bloque de decisión "{label}" debería tener al menos 2 salidas',
                node.id,
            )

        # 8) Aislado
        if not is_start and not is_end and outputs == 0 and inputs == 0:
            report._warning(ISOLATED_NODE, f'"{label}" está aislado (sin conexiones)', node.id)
            continue

        # 6-7) Manejadores requeridos
        meta = get_block_meta(node.type)
        if meta is None:
            continue
        if meta.has_output_handle and not is_end and outputs == 0:
            report._warning(NO_OUTPUTS, f'"{label}" no tiene conexiones salientes', node.id)
        if meta.has_input_handle and not is_start and inputs == 0:
            report._warning(NO_INPUTS, f'"{label}" no tiene conexiones entrantes', node.id)

    # 9) Nombres repetidos
    name_counts = Counter(n.data.name for n in nodes if n.data.name and n.data.name.strip())
    for name, count in name_counts.items():
        if count > 1:
            report._warning(DUPLICATE_NAME, f'Hay {count} bloques con el nombre "{name}"')

    return report
