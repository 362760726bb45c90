"""People, vehicle and approach CRUD over the KuzuDB record store."""
import json
import logging
import uuid
from datetime import datetime, timezone
import kuzu

logger = logging.getLogger(__name__)

PERSON_FIELDS = (
    "name", "mother_name", "father_name", "birth_date", "rg", "cpf",
    "address", "profile_photo", "notes",
)
LOCATION_FIELDS = ("street", "street_number", "district")

_PERSON_RETURN = (
    "p.id, p.name, p.mother_name, p.father_name, p.birth_date, p.rg, p.cpf, "
    "p.address, p.profile_photo, p.photos, p.notes, p.created_at, p.updated_at"
)
_APPROACH_RETURN = (
    "a.id, a.occurred_at, a.street, a.street_number, a.district, "
    "a.latitude, a.longitude, a.created_at, a.updated_at"
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _load_photos(raw: str | None) -> list[str]:
    if not raw:
        return []
    try:
        photos = json.loads(raw)
    except ValueError:
        logger.warning("Discarding unreadable photo list: %r", raw)
        return []
    return [p for p in photos if isinstance(p, str)]


def _person_from_row(row) -> dict:
    person = {"id": row[0]}
    for i, field in enumerate(PERSON_FIELDS[:8], start=1):
        person[field] = row[i] or None
    person["photos"] = _load_photos(row[9])
    person["notes"] = row[10] or None
    person["created_at"] = row[11]
    person["updated_at"] = row[12]
    person["vehicles"] = []
    return person


def _approach_from_row(row) -> dict:
    return {
        "id": row[0],
        "timestamp": row[1],
        "location": {
            "street": row[2] or "",
            "street_number": row[3] or "",
            "district": row[4] or "",
            "latitude": row[5],
            "longitude": row[6],
        },
        "created_at": row[7],
        "updated_at": row[8],
        "people": [],
    }


def _coordinate(value) -> float | None:
    return None if value is None else float(value)


# ── People ──

def create_person(conn: kuzu.Connection, name: str | None = None, *,
                  photos: list[str] | None = None, **fields) -> dict:
    """Create a person record. Unknown keyword fields raise ValueError."""
    unknown = set(fields) - set(PERSON_FIELDS)
    if unknown:
        raise ValueError(f"Unknown person field(s): {', '.join(sorted(unknown))}")
    pid = str(uuid.uuid4())
    now = _now()
    params = {f: fields.get(f) or "" for f in PERSON_FIELDS}
    params["name"] = (name or "").strip()
    params.update({"id": pid, "photos": json.dumps(photos or []), "ts": now})
    conn.execute(
        "CREATE (p:Person {id: $id, name: $name, mother_name: $mother_name, "
        "father_name: $father_name, birth_date: $birth_date, rg: $rg, cpf: $cpf, "
        "address: $address, profile_photo: $profile_photo, photos: $photos, "
        "notes: $notes, created_at: $ts, updated_at: $ts})",
        params
    )
    return get_person(conn, pid)


def get_person(conn: kuzu.Connection, person_id: str) -> dict | None:
    result = conn.execute(
        f"MATCH (p:Person) WHERE p.id = $id RETURN {_PERSON_RETURN}",
        {"id": person_id}
    )
    if not result.has_next():
        return None
    person = _person_from_row(result.get_next())
    person["vehicles"] = list_vehicles(conn, person_id)
    return person


def list_people(conn: kuzu.Connection) -> list[dict]:
    """All people with their vehicles, alphabetical by name (unnamed last)."""
    result = conn.execute(f"MATCH (p:Person) RETURN {_PERSON_RETURN}")
    people = {}
    while result.has_next():
        person = _person_from_row(result.get_next())
        people[person["id"]] = person

    result = conn.execute(
        "MATCH (p:Person)-[:OWNS_VEHICLE]->(v:Vehicle) "
        "RETURN p.id, v.id, v.make, v.model, v.color, v.created_at "
        "ORDER BY v.created_at"
    )
    while result.has_next():
        row = result.get_next()
        if row[0] in people:
            people[row[0]]["vehicles"].append(_vehicle_from_row(row[1:]))

    return sorted(people.values(), key=lambda p: (p["name"] is None, (p["name"] or "").lower()))


def update_person(conn: kuzu.Connection, person_id: str, photos: list[str] | None = None,
                  **fields) -> dict | None:
    """Update the given fields only. Returns the updated person, or None if missing."""
    unknown = set(fields) - set(PERSON_FIELDS)
    if unknown:
        raise ValueError(f"Unknown person field(s): {', '.join(sorted(unknown))}")
    if get_person(conn, person_id) is None:
        return None
    params = {"id": person_id, "ts": _now()}
    assignments = ["p.updated_at = $ts"]
    for field, value in fields.items():
        params[field] = value or ""
        assignments.append(f"p.{field} = ${field}")
    if photos is not None:
        params["photos"] = json.dumps(photos)
        assignments.append("p.photos = $photos")
    conn.execute(
        f"MATCH (p:Person) WHERE p.id = $id SET {', '.join(assignments)}",
        params
    )
    return get_person(conn, person_id)


def delete_person(conn: kuzu.Connection, person_id: str) -> bool:
    """Delete a person, their vehicles and their participation in approaches."""
    if get_person(conn, person_id) is None:
        return False
    conn.execute(
        "MATCH (p:Person)-[:OWNS_VEHICLE]->(v:Vehicle) WHERE p.id = $id DETACH DELETE v",
        {"id": person_id}
    )
    conn.execute("MATCH (p:Person) WHERE p.id = $id DETACH DELETE p", {"id": person_id})
    return True


def search_people(conn: kuzu.Connection, query: str) -> list[dict]:
    """Case-insensitive substring match over names and document numbers."""
    term = (query or "").strip().lower()
    if not term:
        return list_people(conn)
    fields = ("name", "mother_name", "father_name", "rg", "cpf")
    return [
        p for p in list_people(conn)
        if any(term in (p[f] or "").lower() for f in fields)
    ]


# ── Vehicles ──

def _vehicle_from_row(row) -> dict:
    return {"id": row[0], "make": row[1], "model": row[2], "color": row[3], "created_at": row[4]}


def add_vehicle(conn: kuzu.Connection, person_id: str, make: str, model: str, color: str) -> dict:
    if get_person(conn, person_id) is None:
        raise ValueError("Person not found")
    vid = str(uuid.uuid4())
    now = _now()
    conn.execute(
        "CREATE (v:Vehicle {id: $id, make: $make, model: $model, color: $color, created_at: $ts})",
        {"id": vid, "make": make, "model": model, "color": color, "ts": now}
    )
    conn.execute(
        "MATCH (p:Person), (v:Vehicle) WHERE p.id = $pid AND v.id = $vid "
        "CREATE (p)-[:OWNS_VEHICLE]->(v)",
        {"pid": person_id, "vid": vid}
    )
    return {"id": vid, "make": make, "model": model, "color": color, "created_at": now}


def list_vehicles(conn: kuzu.Connection, person_id: str) -> list[dict]:
    result = conn.execute(
        "MATCH (p:Person)-[:OWNS_VEHICLE]->(v:Vehicle) WHERE p.id = $id "
        "RETURN v.id, v.make, v.model, v.color, v.created_at ORDER BY v.created_at",
        {"id": person_id}
    )
    vehicles = []
    while result.has_next():
        vehicles.append(_vehicle_from_row(result.get_next()))
    return vehicles


def delete_vehicle(conn: kuzu.Connection, vehicle_id: str) -> bool:
    result = conn.execute(
        "MATCH (v:Vehicle) WHERE v.id = $id RETURN count(*)", {"id": vehicle_id}
    )
    if not (result.has_next() and result.get_next()[0] > 0):
        return False
    conn.execute("MATCH (v:Vehicle) WHERE v.id = $id DETACH DELETE v", {"id": vehicle_id})
    return True


# ── Approaches ──

def _check_people_exist(conn: kuzu.Connection, person_ids: list[str]):
    missing = [pid for pid in person_ids if get_person(conn, pid) is None]
    if missing:
        raise ValueError(f"Unknown person id(s): {', '.join(missing)}")


def _link_participants(conn: kuzu.Connection, approach_id: str, person_ids: list[str]):
    for seq, pid in enumerate(person_ids):
        conn.execute(
            "MATCH (p:Person), (a:Approach) WHERE p.id = $pid AND a.id = $aid "
            "CREATE (p)-[:PARTICIPATED_IN {seq: $seq}]->(a)",
            {"pid": pid, "aid": approach_id, "seq": seq}
        )


def create_approach(conn: kuzu.Connection, person_ids: list[str], location: dict | None = None,
                    timestamp: str | None = None) -> dict:
    """Record an approach with its location and participants."""
    person_ids = list(dict.fromkeys(person_ids or []))
    if not person_ids:
        raise ValueError("An approach needs at least one person")
    _check_people_exist(conn, person_ids)

    location = location or {}
    aid = str(uuid.uuid4())
    now = _now()
    params = {f: location.get(f) or "" for f in LOCATION_FIELDS}
    params.update({
        "id": aid, "occurred": timestamp or now, "ts": now,
        "latitude": _coordinate(location.get("latitude")),
        "longitude": _coordinate(location.get("longitude")),
    })
    conn.execute(
        "CREATE (a:Approach {id: $id, occurred_at: $occurred, street: $street, "
        "street_number: $street_number, district: $district, "
        "latitude: $latitude, longitude: $longitude, "
        "created_at: $ts, updated_at: $ts})",
        params
    )
    _link_participants(conn, aid, person_ids)
    logger.info("Recorded approach %s with %d people", aid, len(person_ids))
    return get_approach(conn, aid)


def get_approach(conn: kuzu.Connection, approach_id: str) -> dict | None:
    result = conn.execute(
        f"MATCH (a:Approach) WHERE a.id = $id RETURN {_APPROACH_RETURN}",
        {"id": approach_id}
    )
    if not result.has_next():
        return None
    approach = _approach_from_row(result.get_next())

    result = conn.execute(
        "MATCH (p:Person)-[r:PARTICIPATED_IN]->(a:Approach) WHERE a.id = $id "
        "RETURN p.id, r.seq ORDER BY r.seq",
        {"id": approach_id}
    )
    while result.has_next():
        person = get_person(conn, result.get_next()[0])
        if person is not None:
            approach["people"].append(person)
    return approach


def list_approaches(conn: kuzu.Connection) -> list[dict]:
    """All approaches, newest first, each with resolved participant records."""
    people = {p["id"]: p for p in list_people(conn)}

    result = conn.execute(
        f"MATCH (a:Approach) RETURN {_APPROACH_RETURN} ORDER BY a.occurred_at DESC"
    )
    approaches = []
    while result.has_next():
        approaches.append(_approach_from_row(result.get_next()))
    by_id = {a["id"]: a for a in approaches}

    result = conn.execute(
        "MATCH (p:Person)-[r:PARTICIPATED_IN]->(a:Approach) "
        "RETURN a.id, p.id, r.seq ORDER BY r.seq"
    )
    while result.has_next():
        aid, pid, _ = result.get_next()
        if aid in by_id and pid in people:
            by_id[aid]["people"].append(people[pid])
    return approaches


def update_approach(conn: kuzu.Connection, approach_id: str, location: dict | None = None,
                    timestamp: str | None = None, person_ids: list[str] | None = None) -> dict | None:
    """Update location/timestamp; replace the participant set when person_ids is given."""
    if get_approach(conn, approach_id) is None:
        return None
    if person_ids is not None:
        person_ids = list(dict.fromkeys(person_ids))
        if not person_ids:
            raise ValueError("An approach needs at least one person")
        _check_people_exist(conn, person_ids)

    params = {"id": approach_id, "ts": _now()}
    assignments = ["a.updated_at = $ts"]
    if timestamp:
        params["occurred"] = timestamp
        assignments.append("a.occurred_at = $occurred")
    if location is not None:
        for field in LOCATION_FIELDS:
            params[field] = location.get(field) or ""
            assignments.append(f"a.{field} = ${field}")
        params["latitude"] = _coordinate(location.get("latitude"))
        params["longitude"] = _coordinate(location.get("longitude"))
        assignments.extend(["a.latitude = $latitude", "a.longitude = $longitude"])
    conn.execute(
        f"MATCH (a:Approach) WHERE a.id = $id SET {', '.join(assignments)}",
        params
    )

    if person_ids is not None:
        conn.execute(
            "MATCH (p:Person)-[r:PARTICIPATED_IN]->(a:Approach) WHERE a.id = $id DELETE r",
            {"id": approach_id}
        )
        _link_participants(conn, approach_id, person_ids)
    return get_approach(conn, approach_id)


def delete_approach(conn: kuzu.Connection, approach_id: str) -> bool:
    if get_approach(conn, approach_id) is None:
        return False
    conn.execute("MATCH (a:Approach) WHERE a.id = $id DETACH DELETE a", {"id": approach_id})
    return True


def list_approaches_by_person(conn: kuzu.Connection, person_id: str) -> list[dict]:
    """Approaches a person took part in, newest first."""
    return [
        a for a in list_approaches(conn)
        if any(p["id"] == person_id for p in a["people"])
    ]


def search_approaches(conn: kuzu.Connection, query: str) -> list[dict]:
    """Match on street, district, or any participant's name or parents' names."""
    term = (query or "").strip().lower()
    if not term:
        return list_approaches(conn)

    def matches(approach):
        loc = approach["location"]
        if term in loc["street"].lower() or term in loc["district"].lower():
            return True
        return any(
            term in (p[f] or "").lower()
            for p in approach["people"]
            for f in ("name", "mother_name", "father_name")
        )

    return [a for a in list_approaches(conn) if matches(a)]
