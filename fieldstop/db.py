"""KuzuDB embedded record store connection."""
import os
import logging
import kuzu
from pathlib import Path

logger = logging.getLogger(__name__)

DB_PATH = Path(os.environ.get("DB_PATH", Path(__file__).resolve().parent.parent / "graph_data"))
_database = None


def get_database():
    global _database
    if _database is None:
        DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        _database = kuzu.Database(str(DB_PATH))
        _init_schema(_database)
        logger.info("Record store opened at %s", DB_PATH)
    return _database


def _init_schema(db):
    conn = kuzu.Connection(db)

    # ── People and their vehicles ──
    conn.execute(
        "CREATE NODE TABLE IF NOT EXISTS Person("
        "id STRING, name STRING, mother_name STRING, father_name STRING, "
        "birth_date STRING, rg STRING, cpf STRING, address STRING, "
        "profile_photo STRING, photos STRING, notes STRING, "
        "created_at STRING, updated_at STRING, "
        "PRIMARY KEY(id))"
    )
    conn.execute(
        "CREATE NODE TABLE IF NOT EXISTS Vehicle("
        "id STRING, make STRING, model STRING, color STRING, created_at STRING, "
        "PRIMARY KEY(id))"
    )
    conn.execute("CREATE REL TABLE IF NOT EXISTS OWNS_VEHICLE(FROM Person TO Vehicle)")

    # ── Approaches ──
    conn.execute(
        "CREATE NODE TABLE IF NOT EXISTS Approach("
        "id STRING, occurred_at STRING, street STRING, street_number STRING, district STRING, "
        "latitude DOUBLE, longitude DOUBLE, created_at STRING, updated_at STRING, "
        "PRIMARY KEY(id))"
    )
    conn.execute(
        "CREATE REL TABLE IF NOT EXISTS PARTICIPATED_IN("
        "FROM Person TO Approach, seq INT64)"
    )


def get_conn():
    db = get_database()
    conn = kuzu.Connection(db)
    try:
        yield conn
    finally:
        pass
