import os

# Settings are read once, before the app modules are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient

from streetsafety.core.exceptions import GeocodingError
from streetsafety.db.base import Base
from streetsafety.db.session import SessionLocal, engine
from streetsafety.main import app
from streetsafety.models import CrimeReport  # noqa
from streetsafety.services.crimes.engine import CrimeRecordEngine
from streetsafety.services.crimes.severity import SeverityClassifier
from streetsafety.services.crimes.store import CrimeStore
from streetsafety.services.geocoding.nominatim_client import get_geocoder


class FakeGeocoder:
    """Resolves a fixed set of addresses without network access."""

    def __init__(self, known=None):
        self.known = known or {}
        self.queries = []

    def geocode(self, query):
        self.queries.append(query)
        if query not in self.known:
            raise GeocodingError(query)
        return self.known[query]


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def crime_engine(db_session):
    classifier = SeverityClassifier(
        ["murder", "rape", "robbery", "violent assault"],
        ["theft", "drug", "nuisance"],
    )
    return CrimeRecordEngine(CrimeStore(db_session), classifier=classifier)


@pytest.fixture
def geocoder():
    return FakeGeocoder({
        "221B Baker Street, London": (51.5237, -0.1585),
        "Camden Market": (51.5416, -0.1460),
    })


@pytest.fixture
def client(db_session, geocoder):
    app.dependency_overrides[get_geocoder] = lambda: geocoder
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
