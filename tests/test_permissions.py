"""
Tests de CollaborationGate (tabla estática rol -> operaciones).
"""

import pytest

from process_diagram_core.exceptions import AccessDeniedError
from process_diagram_core.permissions import AccessContext, CollaborationGate, Operation, Role, parse_role

WRITE_OPERATIONS = [
    Operation.EDIT_GRAPH,
    Operation.EDIT_METADATA,
    Operation.CREATE_VERSION,
    Operation.RESTORE_VERSION,
]


@pytest.fixture
def gate():
    return CollaborationGate()


def _ctx(role, **kwargs):
    return AccessContext(user_id="u1", role=role, **kwargs)


@pytest.mark.parametrize("operation", WRITE_OPERATIONS)
def test_only_owner_and_editor_can_write(gate, operation):
    assert gate.can(_ctx(Role.OWNER), operation)
    assert gate.can(_ctx(Role.EDITOR), operation)
    assert not gate.can(_ctx(Role.COMMENTER), operation)
    assert not gate.can(_ctx(Role.VIEWER), operation)
    assert not gate.can(_ctx(None), operation)


def test_viewer_cannot_comment_but_commenter_can(gate):
    assert not gate.can(_ctx(Role.VIEWER), Operation.COMMENT)
    assert gate.can(_ctx(Role.COMMENTER), Operation.COMMENT)
    assert gate.can(_ctx(Role.EDITOR), Operation.COMMENT)


def test_every_role_can_view(gate):
    for role in Role:
        assert gate.can(_ctx(role), Operation.VIEW)
        assert gate.can(_ctx(role), Operation.VIEW_VERSIONS)


def test_public_published_process_is_viewable_without_role(gate):
    ctx = _ctx(None, is_public=True)
    assert gate.can(ctx, Operation.VIEW)
    assert not gate.can(ctx, Operation.VIEW_VERSIONS)
    assert not gate.can(ctx, Operation.EDIT_GRAPH)


def test_only_owner_manages_collaborators_and_deletes(gate):
    for operation in (Operation.MANAGE_COLLABORATORS, Operation.DELETE, Operation.HARD_DELETE):
        assert gate.can(_ctx(Role.OWNER), operation)
        assert not gate.can(_ctx(Role.EDITOR), operation)


def test_admin_can_delete_any_process(gate):
    admin = _ctx(None, is_admin=True)
    assert gate.can(admin, Operation.DELETE)
    assert gate.can(admin, Operation.HARD_DELETE)
    assert not gate.can(admin, Operation.EDIT_GRAPH)


def test_authorize_raises_access_denied(gate):
    with pytest.raises(AccessDeniedError) as exc_info:
        gate.authorize(_ctx(Role.VIEWER), Operation.EDIT_GRAPH)
    assert exc_info.value.status_code == 403
    assert exc_info.value.role == "viewer"


def test_grantee_can_remove_own_grant(gate):
    gate.authorize_grant_removal(_ctx(Role.VIEWER), "u1")
    with pytest.raises(AccessDeniedError):
        gate.authorize_grant_removal(_ctx(Role.VIEWER), "u2")


def test_parse_role():
    assert parse_role("editor") is Role.EDITOR
    assert parse_role(None) is None
    with pytest.raises(ValueError):
        parse_role("superuser")
