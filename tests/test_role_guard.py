from uuid import uuid4

import pytest

from clinic.core.errors import AuthorizationError
from clinic.core.security import UserRole
from clinic.services.role_guard import RoleGuard
from tests.fakes import FakeAuthRepository


@pytest.fixture
def repo():
    return FakeAuthRepository()


def test_has_role_reflects_grants(repo):
    user = uuid4()
    repo.grant(user, UserRole.DOCTOR)
    guard = RoleGuard(repo)

    assert guard.has_role(user, UserRole.DOCTOR)
    assert not guard.has_role(user, UserRole.PATIENT)
    assert not guard.has_role(uuid4(), UserRole.DOCTOR)


def test_require_role_raises_forbidden(repo):
    user = uuid4()
    repo.grant(user, UserRole.PATIENT)

    with pytest.raises(AuthorizationError) as exc_info:
        RoleGuard(repo).require_role(user, UserRole.DOCTOR)
    assert exc_info.value.status_code == 403


def test_revoked_role_takes_effect_immediately(repo):
    user = uuid4()
    repo.grant(user, UserRole.ADMIN)
    guard = RoleGuard(repo)
    guard.require_role(user, UserRole.ADMIN)

    repo.revoke(user, UserRole.ADMIN)
    with pytest.raises(AuthorizationError):
        guard.require_role(user, UserRole.ADMIN)


def test_every_check_queries_the_store(repo):
    user = uuid4()
    repo.grant(user, UserRole.PATIENT)
    guard = RoleGuard(repo)

    guard.has_role(user, UserRole.PATIENT)
    guard.has_role(user, UserRole.PATIENT)
    assert repo.calls.count(("has_role", user, UserRole.PATIENT)) == 2
