"""
Script para crear datos de prueba del editor.

Crea un usuario por rol (owner, editor, commenter, viewer y un admin), un
proceso de ejemplo con su versión 1 y los colaboradores correspondientes.
Imprime un token Bearer por usuario para probar la API en local (sin
JWT_SECRET la API no verifica la firma).
"""

import sys
from pathlib import Path

# Agregar el directorio raíz al path
sys.path.insert(0, str(Path(__file__).parent.parent))

import jwt  # noqa: E402

from process_diagram_core.db.database import get_db_session, init_db  # noqa: E402
from process_diagram_core.db.helpers import create_process, create_user, get_user_by_email  # noqa: E402
from process_diagram_core.db.permissions import add_collaborator  # noqa: E402
from process_diagram_core.serialization import load_snapshot  # noqa: E402

DEMO_USERS = [
    {"email": "owner@test.com", "name": "Usuario Owner", "role": "user"},
    {"email": "editor@test.com", "name": "Usuario Editor", "role": "user"},
    {"email": "commenter@test.com", "name": "Usuario Commenter", "role": "user"},
    {"email": "viewer@test.com", "name": "Usuario Viewer", "role": "user"},
    {"email": "admin@test.com", "name": "Administrador", "role": "admin"},
]

DEMO_CONTENT = {
    "nodes": [
        {"id": "start_1", "type": "start", "position": {"x": 0, "y": 120}, "data": {"name": "Solicitud recibida"}},
        {"id": "task_1", "type": "task", "position": {"x": 220, "y": 120},
         "data": {"name": "Revisar solicitud", "responsible": "Compras", "durationMinutes": 30}},
        {"id": "condition_1", "type": "condition", "position": {"x": 460, "y": 120},
         "data": {"name": "¿Monto mayor a 1000?"}},
        {"id": "task_2", "type": "task", "position": {"x": 700, "y": 20},
         "data": {"name": "Aprobación de gerencia", "responsible": "Gerencia"}},
        {"id": "end_1", "type": "end", "position": {"x": 940, "y": 120}, "data": {"name": "Compra aprobada"}},
    ],
    "edges": [
        {"id": "e1", "source": "start_1", "target": "task_1"},
        {"id": "e2", "source": "task_1", "target": "condition_1"},
        {"id": "e3", "source": "condition_1", "target": "task_2", "type": "conditional", "label": "Sí"},
        {"id": "e4", "source": "condition_1", "target": "end_1", "type": "conditional", "label": "No"},
        {"id": "e5", "source": "task_2", "target": "end_1"},
    ],
    "viewport": {"x": 0, "y": 0, "zoom": 1},
}


def seed_demo():
    init_db()
    with get_db_session() as session:
        users = {}
        for data in DEMO_USERS:
            user = get_user_by_email(session, data["email"])
            if not user:
                user = create_user(session, email=data["email"], name=data["name"], role=data["role"])
                print(f"✅ Usuario creado: {user.email}")
            users[data["email"].split("@")[0]] = user

        owner = users["owner"]
        process = create_process(
            session,
            owner_id=owner.id,
            title="Aprobación de compras",
            description="Proceso de ejemplo",
            snapshot=load_snapshot(DEMO_CONTENT),
        )
        for role in ("editor", "commenter", "viewer"):
            add_collaborator(session, process, role, invited_by=owner.id, user_id=users[role].id)
        print(f"📦 Proceso de ejemplo: {process.id}")

        print("\n🔑 Tokens de prueba:")
        for label, user in users.items():
            token = jwt.encode({"sub": user.id, "email": user.email}, "demo", algorithm="HS256")
            print(f"  {label:<10} Bearer {token}")


if __name__ == "__main__":
    seed_demo()
