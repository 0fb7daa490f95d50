"""Tests for the AssignRole use case."""

import pytest

from stockledger.application.assign_role import AssignRoleHandler
from stockledger.domain.exceptions import (
    ConcurrentModificationError,
    InvalidStateError,
    NotAuthorizedError,
    ValidationError,
)
from tests.fakes import ADMIN, CLERK, FakeUserDirectory


class TestAssignRole:

    def test_first_admin_can_be_created_by_anyone(self):
        directory = FakeUserDirectory(admins=set())

        AssignRoleHandler(directory).handle("founder", "founder", "admin")

        assert directory.is_admin("founder")

    def test_admin_grants_role(self):
        directory = FakeUserDirectory({ADMIN})

        AssignRoleHandler(directory).handle(ADMIN, CLERK, "admin")

        assert directory.is_admin(CLERK)

    def test_non_admin_cannot_promote_self(self):
        directory = FakeUserDirectory({ADMIN})

        with pytest.raises(NotAuthorizedError, match="Admin privileges"):
            AssignRoleHandler(directory).handle(CLERK, CLERK, "admin")

        assert not directory.is_admin(CLERK)

    def test_admin_cannot_demote_self(self):
        directory = FakeUserDirectory({ADMIN})

        with pytest.raises(InvalidStateError, match="your own admin"):
            AssignRoleHandler(directory).handle(ADMIN, ADMIN, "user")

        assert directory.is_admin(ADMIN)

    def test_admin_can_demote_another_admin(self):
        directory = FakeUserDirectory({ADMIN, "admin-2"})

        AssignRoleHandler(directory).handle(ADMIN, "admin-2", "user")

        assert directory.get_role("admin-2") == "user"

    def test_unknown_role_rejected(self):
        with pytest.raises(ValidationError, match="Unknown role"):
            AssignRoleHandler(FakeUserDirectory({ADMIN})).handle(ADMIN, CLERK, "owner")

    def test_blank_user_rejected(self):
        with pytest.raises(ValidationError, match="User id"):
            AssignRoleHandler(FakeUserDirectory({ADMIN})).handle(ADMIN, "  ", "user")

    def test_admin_created_concurrently_blocks_bootstrap(self):
        directory = FakeUserDirectory(admins=set())
        directory.has_admin = lambda: False
        directory.roles["rival"] = "admin"

        with pytest.raises(ConcurrentModificationError):
            AssignRoleHandler(directory).handle("mallory", "mallory", "admin")

        assert not directory.is_admin("mallory")
