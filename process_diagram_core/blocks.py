"""
Catálogo de tipos de bloque del editor.

Define los ~25 tipos de bloque agrupados por categoría y la metadata que usa
el motor (manejadores de entrada/salida). La metadata visual (ícono, tamaño)
vive en el frontend; acá solo se guarda lo que afecta a la validación y al
color por defecto.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class BlockCategory(str, Enum):
    """Categoría de bloque en la biblioteca del editor."""

    START_END = "start_end"
    ACTIONS = "actions"
    DECISIONS = "decisions"
    DATA = "data"
    EVENTS = "events"
    PARTICIPANTS = "participants"


class BlockType(str, Enum):
    """Tipo de bloque de un nodo."""

    # Inicio y fin
    START = "start"
    END = "end"
    ENTRY_POINT = "entry_point"
    EXIT_POINT = "exit_point"
    # Acciones
    TASK = "task"
    SUBPROCESS = "subprocess"
    MANUAL_ACTION = "manual_action"
    AUTOMATED_ACTION = "automated_action"
    SEND_NOTIFICATION = "send_notification"
    API_CALL = "api_call"
    # Decisiones
    CONDITION = "condition"
    MULTIPLE_CHOICE = "multiple_choice"
    PARALLEL_GATEWAY = "parallel_gateway"
    EXCLUSIVE_GATEWAY = "exclusive_gateway"
    # Datos
    DATA_INPUT = "data_input"
    DATA_OUTPUT = "data_output"
    DATA_STORE = "data_store"
    DOCUMENT = "document"
    # Eventos
    TIMER_EVENT = "timer_event"
    SIGNAL_EVENT = "signal_event"
    ERROR_EVENT = "error_event"
    ESCALATION_EVENT = "escalation_event"
    # Participantes
    ROLE = "role"
    DEPARTMENT = "department"
    EXTERNAL_SYSTEM = "external_system"


@dataclass(frozen=True)
class BlockMeta:
    """
    Metadata de un tipo de bloque.

    Attributes:
        type: Tipo de bloque.
        category: Categoría en la biblioteca.
        label: Nombre legible por defecto (se usa como `name` inicial).
        color: Color por defecto (hex).
        has_input_handle: El bloque acepta conexiones entrantes.
        has_output_handle: El bloque emite conexiones salientes.
        max_inputs / max_outputs: Límites informativos (no se validan).
    """

    type: BlockType
    category: BlockCategory
    label: str
    color: str
    has_input_handle: bool = True
    has_output_handle: bool = True
    max_inputs: Optional[int] = None
    max_outputs: Optional[int] = None


def _meta(type_: BlockType, category: BlockCategory, label: str, color: str, **kwargs) -> BlockMeta:
    return BlockMeta(type=type_, category=category, label=label, color=color, **kwargs)


BLOCK_METADATA: dict[BlockType, BlockMeta] = {
    meta.type: meta
    for meta in (
        _meta(BlockType.START, BlockCategory.START_END, "Start", "#22c55e",
              has_input_handle=False, max_outputs=1),
        _meta(BlockType.END, BlockCategory.START_END, "End", "#ef4444",
              has_output_handle=False, max_inputs=999),
        _meta(BlockType.ENTRY_POINT, BlockCategory.START_END, "Entry Point", "#84cc16",
              has_input_handle=False),
        _meta(BlockType.EXIT_POINT, BlockCategory.START_END, "Exit Point", "#f97316",
              has_output_handle=False),
        _meta(BlockType.TASK, BlockCategory.ACTIONS, "Task", "#3b82f6"),
        _meta(BlockType.SUBPROCESS, BlockCategory.ACTIONS, "Subprocess", "#8b5cf6"),
        _meta(BlockType.MANUAL_ACTION, BlockCategory.ACTIONS, "Manual Action", "#06b6d4"),
        _meta(BlockType.AUTOMATED_ACTION, BlockCategory.ACTIONS, "Automated Action", "#eab308"),
        _meta(BlockType.SEND_NOTIFICATION, BlockCategory.ACTIONS, "Send Notification", "#f472b6"),
        _meta(BlockType.API_CALL, BlockCategory.ACTIONS, "API Call", "#14b8a6"),
        _meta(BlockType.CONDITION, BlockCategory.DECISIONS, "Condition", "#f59e0b"),
        _meta(BlockType.MULTIPLE_CHOICE, BlockCategory.DECISIONS, "Multiple Choice", "#d946ef"),
        _meta(BlockType.PARALLEL_GATEWAY, BlockCategory.DECISIONS, "Parallel Gateway", "#6366f1"),
        _meta(BlockType.EXCLUSIVE_GATEWAY, BlockCategory.DECISIONS, "Exclusive Gateway", "#ec4899"),
        _meta(BlockType.DATA_INPUT, BlockCategory.DATA, "Data Input", "#0ea5e9"),
        _meta(BlockType.DATA_OUTPUT, BlockCategory.DATA, "Data Output", "#10b981"),
        _meta(BlockType.DATA_STORE, BlockCategory.DATA, "Data Store", "#64748b"),
        _meta(BlockType.DOCUMENT, BlockCategory.DATA, "Document", "#a855f7"),
        _meta(BlockType.TIMER_EVENT, BlockCategory.EVENTS, "Timer", "#f59e0b"),
        _meta(BlockType.SIGNAL_EVENT, BlockCategory.EVENTS, "Signal", "#3b82f6"),
        _meta(BlockType.ERROR_EVENT, BlockCategory.EVENTS, "Error", "#ef4444"),
        _meta(BlockType.ESCALATION_EVENT, BlockCategory.EVENTS, "Escalation", "#f97316"),
        # Participantes: carriles/actores, no forman parte del flujo
        _meta(BlockType.ROLE, BlockCategory.PARTICIPANTS, "Role", "#8b5cf6",
              has_input_handle=False, has_output_handle=False),
        _meta(BlockType.DEPARTMENT, BlockCategory.PARTICIPANTS, "Department", "#6366f1",
              has_input_handle=False, has_output_handle=False),
        _meta(BlockType.EXTERNAL_SYSTEM, BlockCategory.PARTICIPANTS, "External System", "#64748b"),
    )
}

START_TYPES = frozenset({BlockType.START.value, BlockType.ENTRY_POINT.value})
END_TYPES = frozenset({BlockType.END.value, BlockType.EXIT_POINT.value})
DECISION_TYPES = frozenset({
    BlockType.CONDITION.value,
    BlockType.MULTIPLE_CHOICE.value,
    BlockType.EXCLUSIVE_GATEWAY.value,
})


def get_block_meta(block_type: str) -> BlockMeta | None:
    """
    Devuelve la metadata de un tipo de bloque, o None si el tipo no es conocido.

    Los grafos importados pueden traer tipos que el catálogo no conoce; el motor
    los conserva tal cual y simplemente no aplica las reglas que dependen de la
    metadata.
    """
    try:
        return BLOCK_METADATA[BlockType(block_type)]
    except ValueError:
        return None


def blocks_by_category() -> dict[BlockCategory, list[BlockMeta]]:
    """Agrupa el catálogo por categoría (orden de declaración)."""
    grouped: dict[BlockCategory, list[BlockMeta]] = {category: [] for category in BlockCategory}
    for meta in BLOCK_METADATA.values():
        grouped[meta.category].append(meta)
    return grouped
