import pytest

from app.core.constants import RoleEnum
from app.models.program import Program
from app.models.user import User
from app.utils.permission import PermissionHelper


def make_user(user_id: int, role: RoleEnum) -> User:
    return User(id=user_id, role=role, full_name="Someone", email=f"u{user_id}@test.com")


@pytest.mark.parametrize("role,user_id,owner_id,expected", [
    (RoleEnum.ADMIN, 1, 99, True),
    (RoleEnum.ADMIN, 1, None, True),
    (RoleEnum.INSTRUCTOR, 5, 5, True),
    (RoleEnum.INSTRUCTOR, 5, 6, False),
    (RoleEnum.INSTRUCTOR, 5, None, False),
    (RoleEnum.USER, 7, 8, False),
])
def test_can_manage(role, user_id, owner_id, expected):
    assert PermissionHelper.can_manage(make_user(user_id, role), owner_id) is expected


def test_can_view_program_precedence(monkeypatch):
    program = Program(id=10, instructor_id=5, name="P", duration=10)

    monkeypatch.setattr(PermissionHelper, "is_enrolled", staticmethod(lambda db, user, program: False))
    assert PermissionHelper.can_view_program(None, make_user(1, RoleEnum.ADMIN), program)
    assert PermissionHelper.can_view_program(None, make_user(5, RoleEnum.INSTRUCTOR), program)
    assert not PermissionHelper.can_view_program(None, make_user(6, RoleEnum.INSTRUCTOR), program)
    assert not PermissionHelper.can_view_program(None, make_user(7, RoleEnum.USER), program)

    monkeypatch.setattr(PermissionHelper, "is_enrolled", staticmethod(lambda db, user, program: True))
    assert PermissionHelper.can_view_program(None, make_user(7, RoleEnum.USER), program)


def test_enrollment_lookup_failure_denies_access(monkeypatch):
    from app.utils import permission as permission_module

    def _broken_exists(db, *, user_id, program_id):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(permission_module.crud_enrollment, "exists", _broken_exists)
    program = Program(id=10, instructor_id=5, name="P", duration=10)

    assert PermissionHelper.is_enrolled(None, make_user(7, RoleEnum.USER), program) is False
    assert PermissionHelper.can_view_program(None, make_user(7, RoleEnum.USER), program) is False
