"""
Tests de roles de acceso y gestión de colaboradores sobre la base real.
"""

import pytest

from process_diagram_core.db.helpers import create_process, update_process_metadata
from process_diagram_core.db.permissions import (
    add_collaborator,
    get_access_context,
    get_user_access_role,
    list_collaborators,
    remove_collaborator,
    update_collaborator_role,
)
from process_diagram_core.exceptions import AccessDeniedError, NotFoundError
from process_diagram_core.permissions import Role


@pytest.fixture
def owner(make_user):
    return make_user("owner")


@pytest.fixture
def guest(make_user):
    return make_user("guest")


@pytest.fixture
def process(session, owner):
    process = create_process(session, owner.id, "Onboarding")
    session.commit()
    return process


def test_owner_role_comes_from_process(session, owner, guest, process):
    assert get_user_access_role(session, process, owner.id) is Role.OWNER
    assert get_user_access_role(session, process, guest.id) is None


def test_add_collaborator_by_email_and_upsert_role(session, owner, guest, process):
    add_collaborator(session, process, "viewer", invited_by=owner.id, email=guest.email)
    assert get_user_access_role(session, process, guest.id) is Role.VIEWER

    add_collaborator(session, process, "editor", invited_by=owner.id, user_id=guest.id)

    collaborators = list_collaborators(session, process.id)
    assert len(collaborators) == 1
    assert collaborators[0].role == "editor"


def test_cannot_grant_owner_role(session, owner, guest, process):
    with pytest.raises(ValueError):
        add_collaborator(session, process, "owner", invited_by=owner.id, user_id=guest.id)


def test_cannot_invite_yourself(session, owner, process):
    with pytest.raises(ValueError):
        add_collaborator(session, process, "editor", invited_by=owner.id, user_id=owner.id)


def test_invite_unknown_user_fails(session, owner, process):
    with pytest.raises(NotFoundError):
        add_collaborator(session, process, "editor", invited_by=owner.id, email="nadie@example.com")


def test_update_and_remove_collaborator(session, owner, guest, process):
    add_collaborator(session, process, "viewer", invited_by=owner.id, user_id=guest.id)

    update_collaborator_role(session, process.id, guest.id, "commenter")
    assert get_user_access_role(session, process, guest.id) is Role.COMMENTER

    remove_collaborator(session, process, guest.id)
    assert get_user_access_role(session, process, guest.id) is None

    with pytest.raises(NotFoundError):
        remove_collaborator(session, process, guest.id)


def test_owner_cannot_be_removed(session, owner, process):
    with pytest.raises(AccessDeniedError):
        remove_collaborator(session, process, owner.id)


def test_access_context_flags(session, owner, make_user, process):
    admin = make_user("admin", role="admin")

    ctx = get_access_context(session, process, admin)
    assert ctx.role is None
    assert ctx.is_admin
    assert not ctx.is_public

    update_process_metadata(process, status="published", visibility="public")
    assert get_access_context(session, process, admin).is_public
