"""
API HTTP para process-diagram-core.

Esta capa expone endpoints REST sobre el motor de diagramas
(process_diagram_core): procesos, versiones, colaboradores y comentarios.

La API está diseñada para ser consumida por:
- El editor visual (UI web)
- Clientes externos
- Scripts de automatización
"""
