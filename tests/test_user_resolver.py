import pytest
from sqlmodel import select

from federation_portal.application.services.user_service import UserResolver, DuplicatePhoneError
from federation_portal.infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from federation_portal.models import Federation, Sportsman, Trainer, Representative, User


def test_resolve_creates_minimal_user_once(session):
    resolver = UserResolver(SqlUserRepository(session))

    user, created = resolver.resolve_or_create("+996700123456")
    assert created is True
    assert user.name == "New User"
    assert user.type == "REPRESENTATIVE"
    assert user.federation_id is None

    again, created_again = resolver.resolve_or_create("+996700123456")
    assert created_again is False
    assert again.id == user.id
    assert len(session.exec(select(User)).all()) == 1


def test_resolve_links_sportsman_profile(session):
    fed = Federation(code="kg", name="Kyrgyz Federation")
    session.add(fed)
    session.commit()
    session.refresh(fed)
    session.add(Sportsman(first_name="Aibek", last_name="Usenov", phone="+996700123456", federation_id=fed.id))
    session.add(Representative(first_name="Other", last_name="Person", phone="+996700123456"))
    session.commit()

    user, created = UserResolver(SqlUserRepository(session)).resolve_or_create("+996700123456")

    assert created is True
    assert user.type == "SPORTSMAN"
    assert user.name == "Usenov Aibek"
    assert user.federation_id == fed.id
    assert user.federation.code == "kg"
    assert user.entity_id is not None


def test_resolve_links_trainer_before_representative(session):
    session.add(Trainer(first_name="Timur", last_name="Bekov", phone="+77012345678"))
    session.add(Representative(first_name="Rep", last_name="Rep", phone="+77012345678"))
    session.commit()

    user, _ = UserResolver(SqlUserRepository(session)).resolve_or_create("+77012345678")
    assert user.type == "TRAINER"
    assert user.name == "Bekov Timur"


class RacingRepo:
    """Loses the insert race: the row appears between lookup and create."""

    def __init__(self, winner):
        self.winner = winner
        self.lookups = 0

    def get_by_phone(self, phone):
        self.lookups += 1
        return None if self.lookups == 1 else self.winner

    def find_member_profile(self, phone):
        return None

    def create(self, **kwargs):
        raise DuplicatePhoneError(kwargs["phone"])


def test_resolve_reads_winner_after_duplicate(session):
    repo = SqlUserRepository(session)
    winner = repo.create(name="Winner", phone="+996700999999", type="REPRESENTATIVE")

    user, created = UserResolver(RacingRepo(winner)).resolve_or_create("+996700999999")
    assert created is False
    assert user.id == winner.id


def test_duplicate_phone_raises_from_repository(session):
    repo = SqlUserRepository(session)
    repo.create(name="A", phone="+996700111111", type="REPRESENTATIVE")
    with pytest.raises(DuplicatePhoneError):
        repo.create(name="B", phone="+996700111111", type="REPRESENTATIVE")
