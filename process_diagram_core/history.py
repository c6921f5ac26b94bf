"""
Historial de deshacer/rehacer de una sesión de edición.

Guarda snapshots completos del grafo (no diffs) y un índice al estado actual.
La capacidad es acotada: al superarla se descarta el snapshot más antiguo.

El historial es local a una sesión de edición: no se persiste ni se comparte
entre sesiones o usuarios.

Cuándo hacer `push`
-------------------
Después de que una mutación "se asienta": alta/baja de nodo o conexión, fin de
un arrastre, fin de una edición en el panel de propiedades. NO en cada tecla
ni en cada cuadro del arrastre.

Los snapshots se copian al entrar y al salir: modificar los nodos de un
snapshot ya agregado (o devuelto) no cambia el historial.
"""

from __future__ import annotations

import copy
from typing import Optional

from .domain_models import GraphSnapshot

DEFAULT_CAPACITY = 50


class HistoryStack:
    """
    Log acotado de snapshots con índice actual.

    Invariantes:
    - `-1 <= index < len(entries)`; `index == -1` solo si está vacío.
    - `len(entries) <= capacity`.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("La capacidad del historial debe ser al menos 1")
        self.capacity = capacity
        self._entries: list[GraphSnapshot] = []
        self._index = -1

    @property
    def index(self) -> int:
        return self._index

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def current(self) -> Optional[GraphSnapshot]:
        if self._index < 0:
            return None
        return copy.deepcopy(self._entries[self._index])

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def push(self, snapshot: GraphSnapshot) -> None:
        """
        Agrega un snapshot como nuevo estado actual.

        Si antes se hizo `undo`, la rama de "rehacer" se descarta.
        """
        del self._entries[self._index + 1:]
        self._entries.append(copy.deepcopy(snapshot))
        if len(self._entries) > self.capacity:
            # FIFO: se pierde el estado más antiguo
            del self._entries[0]
        self._index = len(self._entries) - 1

    def undo(self) -> Optional[GraphSnapshot]:
        """
        Retrocede un paso y devuelve el snapshot de ese índice.

        En el índice 0 (o sin historial) no hace nada y devuelve el actual.
        """
        if self.can_undo():
            self._index -= 1
        return self.current

    def redo(self) -> Optional[GraphSnapshot]:
        """Avanza un paso; en la punta no hace nada y devuelve el actual."""
        if self.can_redo():
            self._index += 1
        return self.current

    def reset(self, initial: Optional[GraphSnapshot] = None) -> None:
        """Vacía el historial; si se pasa `initial`, queda como único estado."""
        self._entries = []
        self._index = -1
        if initial is not None:
            self.push(initial)
