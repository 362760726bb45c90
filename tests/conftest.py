"""Shared fixtures for the fieldstop test suite."""
import pytest
import kuzu
from fastapi.testclient import TestClient

from fieldstop.db import _init_schema, get_conn
from fieldstop import crud


# ── Database fixtures ──

@pytest.fixture
def db_path(tmp_path):
    """Temp directory for a fresh KuzuDB."""
    return tmp_path / "test_db"


@pytest.fixture
def db(db_path):
    """Initialized KuzuDB with the full schema."""
    database = kuzu.Database(str(db_path))
    _init_schema(database)
    yield database
    database.close()


@pytest.fixture
def conn(db):
    """KuzuDB connection for unit tests."""
    connection = kuzu.Connection(db)
    yield connection
    connection.close()


# ── Record fixtures ──

@pytest.fixture
def person_ana(conn):
    return crud.create_person(conn, "Ana Souza", mother_name="Maria Souza",
                              cpf="529.982.247-25", profile_photo="photos/ana.jpg")


@pytest.fixture
def person_bruno(conn):
    return crud.create_person(conn, "Bruno Lima", father_name="Carlos Lima", rg="12.345.678-9")


@pytest.fixture
def person_carla(conn):
    return crud.create_person(conn, "Carla Dias")


@pytest.fixture
def person_davi(conn):
    return crud.create_person(conn, "Davi Rocha")


@pytest.fixture
def chain(conn, person_ana, person_bruno, person_carla, person_davi):
    """Ana-Bruno, Bruno-Carla, Carla-Davi: one approach per pair."""
    e1 = crud.create_approach(conn, [person_ana["id"], person_bruno["id"]],
                              {"street": "Rua A", "district": "Centro",
                               "latitude": -23.55, "longitude": -46.63},
                              "2024-01-01T10:00:00+00:00")
    e2 = crud.create_approach(conn, [person_bruno["id"], person_carla["id"]],
                              {"street": "Rua B", "district": "Moema",
                               "latitude": -23.60, "longitude": -46.66},
                              "2024-02-01T10:00:00+00:00")
    e3 = crud.create_approach(conn, [person_carla["id"], person_davi["id"]],
                              {"street": "Rua C", "district": "Lapa"},
                              "2024-03-01T10:00:00+00:00")
    return {
        "ana": person_ana, "bruno": person_bruno,
        "carla": person_carla, "davi": person_davi,
        "e1": e1, "e2": e2, "e3": e3,
    }


# ── FastAPI app fixtures ──

@pytest.fixture
def app_with_db(db):
    """FastAPI app with dependency override pointing at test DB."""
    from fieldstop.main import app

    def override_get_conn():
        c = kuzu.Connection(db)
        try:
            yield c
        finally:
            pass

    app.dependency_overrides[get_conn] = override_get_conn
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app_with_db):
    return TestClient(app_with_db, raise_server_exceptions=False)
