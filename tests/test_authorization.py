from __future__ import annotations

import pytest

from timeclonk.core.auth import Operation, Role, is_allowed, parse_role

EXPECTED: dict[Role | None, set[Operation]] = {
    Role.ADMIN: set(Operation),
    Role.MEMBER: {
        Operation.CREATE_PROJECT,
        Operation.VIEW_PROJECT,
        Operation.SAVE_PROJECT_TIME,
        Operation.DELETE_PROJECT_ENTRIES,
        Operation.SAVE_PROJECT_INVOICE,
    },
    Role.OBSERVER: {Operation.CREATE_PROJECT, Operation.VIEW_PROJECT},
    None: {Operation.CREATE_PROJECT},
}


@pytest.mark.parametrize("role", list(EXPECTED))
@pytest.mark.parametrize("operation", list(Operation))
def test_role_table(role: Role | None, operation: Operation) -> None:
    assert is_allowed(role, operation) is (operation in EXPECTED[role])


def test_only_admin_edits_project() -> None:
    assert is_allowed(Role.ADMIN, Operation.EDIT_PROJECT)
    assert not is_allowed(Role.MEMBER, Operation.EDIT_PROJECT)
    assert not is_allowed(Role.OBSERVER, Operation.EDIT_PROJECT)
    assert not is_allowed(None, Operation.EDIT_PROJECT)


def test_parse_role_accepts_stored_names_only() -> None:
    assert parse_role("Admin") is Role.ADMIN
    assert parse_role("Member") is Role.MEMBER
    assert parse_role("Observer") is Role.OBSERVER
    assert parse_role("admin") is None
    assert parse_role("Owner") is None
