"""Shared fixtures: in-memory storage, a fixed pipeline handle and an API client."""

import pytest
from fastapi.testclient import TestClient

from catalog_backend.api.dependencies import get_embedding_pipeline, get_record_store
from catalog_backend.api.main import app
from catalog_backend.config import Settings, get_settings
from catalog_backend.database.memory_store import InMemoryRecordStore
from catalog_backend.models.title_models import SourceRecord
from catalog_backend.services.embedding_service import build_embedding_pipeline


@pytest.fixture
def settings():
    return Settings(storage_backend="memory")


@pytest.fixture
def store(settings):
    return InMemoryRecordStore(primary_keys={
        settings.titles_table: settings.key_column,
        settings.embeddings_table: settings.key_column,
    })


@pytest.fixture(scope="session")
def pipeline():
    return build_embedding_pipeline(Settings(storage_backend="memory"))


@pytest.fixture
def sample_records():
    return [
        SourceRecord(show_id="s001", type="Movie", title="Star Drift", director="Ana Ruiz",
                     country="Spain", release_year=2019, rating="PG-13", duration="104 min",
                     listed_in="Sci-Fi & Fantasy", description="A crew lost between galaxies."),
        SourceRecord(show_id="s002", type="TV Show", title="Kitchen Wars", country="United States",
                     release_year=2021, rating="TV-PG", duration="2 Seasons",
                     listed_in="Reality TV", description="Chefs compete for a restaurant."),
        SourceRecord(show_id="s003", type="Movie", title="Quiet Harbor", director="Lena Berg",
                     country="Norway", release_year=2015, rating="R", duration="98 min",
                     listed_in="Dramas, International Movies", description="A fisherman returns home."),
        SourceRecord(show_id="s004", type="Movie", title="Orbit Nine", country="Japan",
                     release_year=2022, rating="PG", duration="121 min",
                     listed_in="Sci-Fi & Fantasy, Action & Adventure", description="Pilots defend a station."),
        SourceRecord(show_id="s005", type="TV Show", title="Night Shift", country="India",
                     release_year=2020, rating="TV-MA", duration="1 Season",
                     listed_in="Crime TV Shows, Dramas", description="Detectives chase a serial thief."),
    ]


@pytest.fixture
def seeded_store(store, settings, sample_records):
    store.upsert_batch(settings.titles_table, [r.to_row() for r in sample_records], conflict_key="show_id")
    store.upsert_calls.clear()
    return store


@pytest.fixture
def client(store, settings, pipeline):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_embedding_pipeline] = lambda: pipeline
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
