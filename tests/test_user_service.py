# Rev 0.2.0
from __future__ import annotations

import pytest

from taskhub.errors import NotFoundError, ValidationError
from taskhub.services.user_service import DEFAULT_AVATAR_COLOR, initials_for


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Margaret Wilson", "MW"),
        ("robert  j johnson", "RJ"),
        ("Cher", "CH"),
        ("   ", "?"),
    ],
)
def test_initials_for(name, expected):
    assert initials_for(name) == expected


def test_create_user_derives_display_fields(ctx):
    u = ctx.users.create_user(username="sjones", full_name="Sarah Jones", role="Community Educator")
    assert u.initials == "SJ"
    assert u.avatar_color == DEFAULT_AVATAR_COLOR
    assert ctx.users.get_user(u.id) == u


def test_username_is_unique(ctx):
    ctx.users.create_user(username="tgreen", full_name="Thomas Green")
    with pytest.raises(ValidationError) as ei:
        ctx.users.create_user(username="tgreen", full_name="Tom Green")
    assert ei.value.errors[0].field == "username"


def test_update_user(ctx):
    u = ctx.users.create_user(username="dparker", full_name="David Parker")
    updated = ctx.users.update_user(u.id, role="Energy Expert", avatar_color="#107C10")
    assert (updated.role, updated.avatar_color) == ("Energy Expert", "#107C10")
    with pytest.raises(NotFoundError):
        ctx.users.update_user(999, role="x")


def test_update_unknown_user_with_taken_username(ctx):
    ctx.users.create_user(username="tgreen", full_name="Thomas Green")
    with pytest.raises(NotFoundError):
        ctx.users.update_user(999, username="tgreen")


def test_delete_user_unsets_references(ctx):
    u = ctx.users.create_user(username="rjohnson", full_name="Robert Johnson")
    t = ctx.tasks.create_task(title="Solar", assignee_id=u.id, reporter_id=u.id, user_id=u.id)

    assert ctx.users.delete_user(u.id)
    assert ctx.users.delete_user(u.id) is False

    task = ctx.tasks.get_task(t.id)
    assert task.assignee_id is None and task.reporter_id is None
    # the activity log keeps the departed user id
    assert any(a.user_id == u.id for a in ctx.storage.activities.list_recent_activities(10))


def test_activities_for_unknown_user(ctx):
    with pytest.raises(NotFoundError):
        ctx.users.activities_for_user(3)
