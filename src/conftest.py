"""Fixtures shared by every app."""

import secrets
import string
import typing as t

import faker
import pytest
from django.core.cache import cache
from django.test.client import Client
from ninja_jwt.tokens import RefreshToken

from accounts.models import User
from accounts.service import claims_service
from clubs.models import Club, Membership


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Run Celery tasks synchronously so tests can observe their side effects."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


@pytest.fixture(autouse=True)
def clear_cache() -> t.Iterator[None]:
    """Reset the cache (used by the throttles) between tests."""
    cache.clear()
    yield
    cache.clear()


class UserFactory:
    """Factory for creating User instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> User:
        username = kwargs.pop(
            "username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)) + "@user.test"
        )
        kwargs.setdefault("email", username)
        kwargs.setdefault("first_name", self.fake.first_name())
        kwargs.setdefault("last_name", self.fake.last_name())
        return User.objects.create_user(username=username, password=kwargs.pop("password", "password"), **kwargs)


@pytest.fixture
def user_factory() -> UserFactory:
    return UserFactory()


@pytest.fixture
def user(user_factory: UserFactory) -> User:
    """A standard, non-privileged user."""
    return user_factory.create_user(username="student@example.com", first_name="Sam")


@pytest.fixture
def other_user(user_factory: UserFactory) -> User:
    return user_factory.create_user(username="other@example.com")


@pytest.fixture
def super_admin(user_factory: UserFactory) -> User:
    """A user holding the super admin claim."""
    admin = user_factory.create_user(username="admin@example.com")
    claims_service.set_super_admin(admin)
    return admin


def make_client(user: User) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")  # type: ignore[attr-defined]


@pytest.fixture
def user_client(user: User) -> Client:
    """API client for the standard user."""
    return make_client(user)


@pytest.fixture
def other_client(other_user: User) -> Client:
    return make_client(other_user)


@pytest.fixture
def super_admin_client(super_admin: User) -> Client:
    """API client for the super admin."""
    return make_client(super_admin)


# --- Clubs ---


@pytest.fixture
def club() -> Club:
    """An active club."""
    return Club.objects.create(name="Chess Club", slug="chess-club", status=Club.Status.ACTIVE)


@pytest.fixture
def officer(user_factory: UserFactory, club: Club) -> User:
    """An approved officer of the club."""
    officer = user_factory.create_user(username="officer@example.com")
    Membership.objects.create(
        club=club, user=officer, role=Membership.Role.OFFICER, status=Membership.Status.APPROVED
    )
    return officer


@pytest.fixture
def officer_client(officer: User) -> Client:
    return make_client(officer)


@pytest.fixture
def member(user: User, club: Club) -> Membership:
    """The standard user as an approved, dues-paid member of the club."""
    return Membership.objects.create(
        club=club,
        user=user,
        status=Membership.Status.APPROVED,
        dues_status=Membership.DuesStatus.PAID,
    )
