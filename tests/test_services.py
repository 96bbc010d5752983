"""Tests des services métier (soumission unique par email, administration, mot de passe)."""

from unittest.mock import Mock

import pytest

from fortune_backend.domain.auth import hash_password
from fortune_backend.domain.entities import FortuneQuery, UserData
from fortune_backend.domain.errors import (
    AdminPasswordNotConfigured,
    DuplicateEmailError,
    FortuneAlreadyExists,
    InvalidPasswordError,
    PasswordPolicyError,
)
from fortune_backend.domain.fortune_generator import FortuneGenerator
from fortune_backend.domain.services import AdminService, FortuneService, email_digest
from fortune_backend.infra.repo.admin_config_repo import InMemoryAdminConfigRepo
from fortune_backend.infra.repo.fortune_repo import InMemoryFortuneRepo


def _user(email="Alice@Example.com ", age="26-35", day="Monday", blood="A"):
    return UserData(email=email, age_range=age, birth_day=day, blood_group=blood)


@pytest.fixture
def fortune_repo():
    return InMemoryFortuneRepo()


@pytest.fixture
def fortune_service(tables, fortune_repo):
    return FortuneService(FortuneGenerator(tables), fortune_repo)


def test_submit_normalizes_email(fortune_service):
    record = fortune_service.submit(_user())
    assert record.user_data.email == "alice@example.com"
    assert fortune_service.check_email("ALICE@example.com") == record


def test_check_unknown_email(fortune_service):
    assert fortune_service.check_email("nobody@example.com") is None


def test_second_submission_returns_existing(fortune_service):
    first = fortune_service.submit(_user())
    with pytest.raises(FortuneAlreadyExists) as exc:
        fortune_service.submit(_user(email="alice@example.com", age="<18", blood="O"))
    assert exc.value.record == first
    assert exc.value.record.fortune.lucky_number == first.fortune.lucky_number


def test_concurrent_duplicate_maps_to_existing(tables):
    """Une violation d'unicité à l'écriture renvoie la fortune gagnante."""
    existing = InMemoryFortuneRepo()
    winner = FortuneService(FortuneGenerator(tables), existing).submit(_user())
    repo = Mock()
    repo.get_by_email.side_effect = [None, winner]
    repo.save.side_effect = DuplicateEmailError("alice@example.com")
    service = FortuneService(FortuneGenerator(tables), repo)
    with pytest.raises(FortuneAlreadyExists) as exc:
        service.submit(_user())
    assert exc.value.record == winner


def test_email_digest_hides_address():
    digest = email_digest("Alice@Example.com")
    assert digest == email_digest("alice@example.com")
    assert "alice" not in digest
    assert len(digest) == 12  # noqa: PLR2004


@pytest.fixture
def admin_repo():
    return InMemoryAdminConfigRepo()


def _admin(fortune_repo, admin_repo, **kwargs):
    return AdminService(fortune_repo, admin_repo, **kwargs)


def test_bootstrap_password_is_hashed_and_persisted(fortune_repo, admin_repo):
    svc = _admin(fortune_repo, admin_repo, bootstrap_password="initial1")
    assert svc.verify_password("initial1")
    stored = admin_repo.get_password_hash()
    assert stored and stored != "initial1"


def test_bootstrap_hash(fortune_repo, admin_repo):
    svc = _admin(fortune_repo, admin_repo, bootstrap_hash=hash_password("from-hash"))
    assert svc.verify_password("from-hash")
    assert not svc.verify_password("other")


def test_stored_hash_wins_over_bootstrap(fortune_repo, admin_repo):
    admin_repo.set_password_hash(hash_password("stored-pw"))
    svc = _admin(fortune_repo, admin_repo, bootstrap_password="bootstrap")
    assert svc.verify_password("stored-pw")
    assert not svc.verify_password("bootstrap")


def test_no_password_configured(fortune_repo, admin_repo):
    with pytest.raises(AdminPasswordNotConfigured):
        _admin(fortune_repo, admin_repo).verify_password("x")


def test_change_password(fortune_repo, admin_repo):
    svc = _admin(fortune_repo, admin_repo, bootstrap_password="initial1")
    svc.change_password("initial1", "brand-new")
    assert svc.verify_password("brand-new")
    assert not svc.verify_password("initial1")


def test_change_password_too_short(fortune_repo, admin_repo):
    svc = _admin(fortune_repo, admin_repo, bootstrap_password="initial1")
    with pytest.raises(PasswordPolicyError):
        svc.change_password("initial1", "short")


def test_change_password_wrong_current(fortune_repo, admin_repo):
    svc = _admin(fortune_repo, admin_repo, bootstrap_password="initial1")
    with pytest.raises(InvalidPasswordError):
        svc.change_password("wrong", "brand-new")


def test_admin_data_operations(fortune_service, fortune_repo, admin_repo):
    for i, day in enumerate(("Monday", "Tuesday", "Wednesday")):
        fortune_service.submit(_user(email=f"user{i}@example.com", day=day))
    svc = _admin(fortune_repo, admin_repo)
    records, count = svc.list_fortunes(FortuneQuery(limit=2))
    assert len(records) == 2  # noqa: PLR2004
    assert count == 3  # noqa: PLR2004
    assert len(svc.recent(limit=1)) == 1
    assert svc.export_csv().count("\n") == 4  # noqa: PLR2004
    assert svc.analytics().total == 3  # noqa: PLR2004
    assert svc.delete(records[0].id) is True
    assert svc.delete("missing") is False
    assert svc.clear_all() == 2  # noqa: PLR2004
