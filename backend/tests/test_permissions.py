import pytest

from sewadar_api.core.permissions import (
    ANY_ROLE,
    CAN_EDIT,
    IS_ADMIN,
    UserRole,
    can_edit,
    has_role,
    is_admin,
    role_set,
)


def test_role_unions():
    assert CAN_EDIT == {UserRole.ADMINISTRATOR, UserRole.EDITOR}
    assert IS_ADMIN == {UserRole.ADMINISTRATOR}
    assert ANY_ROLE == set(UserRole)


@pytest.mark.parametrize(
    "role,editor,admin",
    [
        (UserRole.ADMINISTRATOR, True, True),
        (UserRole.EDITOR, True, False),
        (UserRole.VIEWER, False, False),
        ("ADMIN", True, True),
        ("editor", True, False),
    ],
)
def test_role_checks(role, editor, admin):
    assert can_edit(role) is editor
    assert is_admin(role) is admin


def test_unknown_role_never_matches():
    assert has_role("SUPERUSER", ANY_ROLE) is False


def test_parse_rejects_unknown_role():
    with pytest.raises(ValueError):
        UserRole.parse("root")


def test_role_set_coerces_values():
    assert role_set(["ADMIN", UserRole.EDITOR]) == CAN_EDIT
