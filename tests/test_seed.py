import pytest
from sqlalchemy.exc import IntegrityError

from marketplace.data.models import CatalogSetModel, ProviderSetModel, SystemSettingModel, UserModel
from marketplace.data.seed import seed as seed_demo_data
from marketplace.domain.errors import StorageError
from marketplace.domain.policy import Identity, Role
from marketplace.domain.schemas import CatalogSetCreate
from marketplace.services.catalog_service import CatalogService
from tests.conftest import count_rows


def test_seed_lets_database_assign_ids(session_factory):
    users = seed_demo_data(session_factory)

    assert [u.username for u in users] == ["admin", "maker-supplies", "jane", "print-room"]
    assert all(u.id is not None for u in users)

    session = session_factory()
    try:
        provider = session.query(UserModel).filter_by(username="maker-supplies").one()
        set_ids = {s.id for s in session.query(CatalogSetModel).all()}
        listings = session.query(ProviderSetModel).all()

        assert len(listings) == 2
        assert all(listing.provider_id == provider.id for listing in listings)
        assert {listing.set_id for listing in listings} == set_ids
    finally:
        session.close()

    assert count_rows(session_factory, SystemSettingModel) == 3


def test_seed_skips_populated_database(session_factory):
    seed_demo_data(session_factory)
    assert seed_demo_data(session_factory) == []
    assert count_rows(session_factory, UserModel) == 4
    assert count_rows(session_factory, CatalogSetModel) == 2


def test_create_set_after_seed_gets_fresh_id(session_factory):
    """Po seedzie kolejny insert dostaje nowe id, bez kolizji klucza."""
    users = seed_demo_data(session_factory)
    admin = next(u for u in users if u.role == "admin")

    session = session_factory()
    try:
        created = CatalogService(session).create_set(
            Identity(user_id=admin.id, role=Role.ADMIN), CatalogSetCreate(name="Drone Kit")
        )
        existing = {s.id for s in session.query(CatalogSetModel).filter(CatalogSetModel.name != "Drone Kit")}
    finally:
        session.close()

    assert created.id not in existing
    assert count_rows(session_factory, CatalogSetModel) == 3


def test_create_set_integrity_failure_is_storage_error(db, seed, admin, monkeypatch, session_factory):
    service = CatalogService(db)

    def failing_insert(catalog_set):
        raise IntegrityError("INSERT INTO catalog_sets", {}, Exception("duplicate key value"))

    monkeypatch.setattr(service.repo, "create_set", failing_insert)

    with pytest.raises(StorageError) as exc:
        service.create_set(admin, CatalogSetCreate(name="Drone Kit"))

    assert exc.value.status_code == 500
    assert count_rows(session_factory, CatalogSetModel) == 4
