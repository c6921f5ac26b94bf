"""
Endpoint para consultar el catálogo de tipos de bloque.

La biblioteca del editor lo usa para armar las categorías y saber qué
bloques aceptan conexiones entrantes/salientes.
"""

from fastapi import APIRouter

from process_diagram_core.blocks import blocks_by_category, get_block_meta
from process_diagram_core.exceptions import NotFoundError

router = APIRouter(prefix="/api/v1/blocks", tags=["catalog"])


def _block_dict(meta) -> dict:
    return {
        "type": meta.type.value,
        "category": meta.category.value,
        "label": meta.label,
        "color": meta.color,
        "hasInputHandle": meta.has_input_handle,
        "hasOutputHandle": meta.has_output_handle,
        "maxInputs": meta.max_inputs,
        "maxOutputs": meta.max_outputs,
    }


@router.get("")
async def list_blocks():
    """
    Lista los tipos de bloque agrupados por categoría.

    Returns:
        Lista de categorías, cada una con sus bloques
    """
    return [
        {"category": category.value, "blocks": [_block_dict(meta) for meta in blocks]}
        for category, blocks in blocks_by_category().items()
    ]


@router.get("/{block_type}")
async def get_block(block_type: str):
    meta = get_block_meta(block_type)
    if meta is None:
        raise NotFoundError("Tipo de bloque", block_type)
    return _block_dict(meta)
