import os

# Must be set before farm_catalog.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-long-enough-for-hs256-signing"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from farm_catalog.api.deps import get_db
from farm_catalog.core.security import create_access_token
from farm_catalog.main import app
from farm_catalog.models import Base, Farm, Species, Breed, Country
from farm_catalog.services.scope import Actor, Role

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    """Fresh schema for every test"""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def second_db(db):
    """Another session on the same database, as a second user would hold"""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    """API client sharing the test session"""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ============ ACTORS ============

@pytest.fixture
def operator() -> Actor:
    return Actor(role=Role.OPERATOR)


@pytest.fixture
def farm(db) -> Farm:
    farm = Farm(name="Ferme El Bordj", country_code="DZ")
    db.add(farm)
    db.commit()
    db.refresh(farm)
    return farm


@pytest.fixture
def other_farm(db) -> Farm:
    farm = Farm(name="Ferme Atlas", country_code="MA")
    db.add(farm)
    db.commit()
    db.refresh(farm)
    return farm


@pytest.fixture
def farmer(farm) -> Actor:
    return Actor(role=Role.FARMER, farm_id=farm.id)


@pytest.fixture
def other_farmer(other_farm) -> Actor:
    return Actor(role=Role.FARMER, farm_id=other_farm.id)


def auth_headers(role: str, farm_id: int = None, locale: str = "en") -> dict:
    claims = {"role": role}
    if farm_id is not None:
        claims["farm_id"] = farm_id
    return {
        "Authorization": f"Bearer {create_access_token(claims)}",
        "Accept-Language": locale,
    }


@pytest.fixture
def operator_headers() -> dict:
    return auth_headers("operator")


@pytest.fixture
def farmer_headers(farm) -> dict:
    return auth_headers("farmer", farm.id)


# ============ CATALOG DATA ============

def add_entry(db, model, code, name_fr, farm_id=None, **fields):
    entry = model(code=code, name_fr=name_fr, farm_id=farm_id, **fields)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


@pytest.fixture
def ovine(db) -> Species:
    return add_entry(db, Species, "OVI", "Ovin", name_en="Sheep", display_order=1)


@pytest.fixture
def breeds(db, ovine) -> dict:
    """Three global sheep breeds"""
    return {
        "ouled_djellal": add_entry(db, Breed, "OULED_DJELLAL", "Ouled Djellal", species_id=ovine.id, display_order=1),
        "rembi": add_entry(db, Breed, "REMBI", "Rembi", species_id=ovine.id, display_order=2),
        "hamra": add_entry(db, Breed, "HAMRA", "Hamra", species_id=ovine.id, display_order=3),
    }


@pytest.fixture
def countries(db) -> dict:
    return {
        "DZ": add_entry(db, Country, "DZ", "Algérie", name_en="Algeria", region="Maghreb"),
        "FR": add_entry(db, Country, "FR", "France", name_en="France", region="Europe"),
        "MA": add_entry(db, Country, "MA", "Maroc", name_en="Morocco", region="Maghreb"),
    }


@pytest.fixture
def make_entry(db):
    """Factory: make_entry(Breed, "CODE", "Nom", farm_id=None, species_id=...)"""

    def _make(model, code, name_fr, farm_id=None, **fields):
        return add_entry(db, model, code, name_fr, farm_id=farm_id, **fields)

    return _make


@pytest.fixture
def headers_for():
    """Factory: headers_for("farmer", farm_id, locale="fr")"""
    return auth_headers
