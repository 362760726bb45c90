import logging

from fastapi import FastAPI, Depends, HTTPException, Query

from .db import get_conn
from .geocoding import GeocodingClient, GeocodingError
from . import crud, schemas, mapview, network
from .network_loader import LOAD_ERROR_MESSAGE
from .plotly_graph.plotly_render import build_network_figure_json

logger = logging.getLogger(__name__)

app = FastAPI(title="fieldstop")


def get_geocoder() -> GeocodingClient:
    return GeocodingClient()


def _require_person(conn, person_id: str) -> dict:
    person = crud.get_person(conn, person_id)
    if person is None:
        raise HTTPException(404, "Person not found")
    return person


def _load_network(conn, person_id: str) -> dict:
    try:
        person = _require_person(conn, person_id)
        approaches = crud.list_approaches(conn)
    except RuntimeError as e:
        logger.error("Could not fetch approaches for network of %s: %s", person_id, e)
        raise HTTPException(503, LOAD_ERROR_MESSAGE)
    return network.build_network(person, approaches)


@app.get("/health")
def health():
    return {"ok": True}


# ── People ──

@app.get("/api/people", response_model=list[schemas.PersonOut])
def list_people(q: str | None = None, conn=Depends(get_conn)):
    if q is not None:
        return crud.search_people(conn, q)
    return crud.list_people(conn)


@app.post("/api/people", response_model=schemas.PersonOut)
def create_person(body: schemas.PersonCreate, conn=Depends(get_conn)):
    fields = body.model_dump(exclude={"vehicles", "photos", "name"})
    person = crud.create_person(conn, body.name, photos=body.photos, **fields)
    for v in body.vehicles:
        crud.add_vehicle(conn, person["id"], v.make, v.model, v.color)
    return crud.get_person(conn, person["id"])


@app.get("/api/people/{person_id}", response_model=schemas.PersonOut)
def get_person(person_id: str, conn=Depends(get_conn)):
    return _require_person(conn, person_id)


@app.put("/api/people/{person_id}", response_model=schemas.PersonOut)
def update_person(person_id: str, body: schemas.PersonUpdate, conn=Depends(get_conn)):
    fields = body.model_dump(exclude_unset=True)
    photos = fields.pop("photos", None)
    person = crud.update_person(conn, person_id, photos=photos, **fields)
    if person is None:
        raise HTTPException(404, "Person not found")
    return person


@app.delete("/api/people/{person_id}")
def delete_person(person_id: str, conn=Depends(get_conn)):
    if not crud.delete_person(conn, person_id):
        raise HTTPException(404, "Person not found")
    return {"ok": True}


@app.post("/api/people/{person_id}/vehicles", response_model=schemas.VehicleOut)
def add_vehicle(person_id: str, body: schemas.VehicleCreate, conn=Depends(get_conn)):
    _require_person(conn, person_id)
    return crud.add_vehicle(conn, person_id, body.make, body.model, body.color)


@app.delete("/api/vehicles/{vehicle_id}")
def delete_vehicle(vehicle_id: str, conn=Depends(get_conn)):
    if not crud.delete_vehicle(conn, vehicle_id):
        raise HTTPException(404, "Vehicle not found")
    return {"ok": True}


@app.get("/api/people/{person_id}/approaches", response_model=list[schemas.ApproachOut])
def person_approaches(person_id: str, conn=Depends(get_conn)):
    _require_person(conn, person_id)
    return crud.list_approaches_by_person(conn, person_id)


# ── Relationship network ──

@app.get("/api/people/{person_id}/network", response_model=schemas.NetworkOut)
def person_network(person_id: str, conn=Depends(get_conn)):
    return _load_network(conn, person_id)


@app.get("/api/people/{person_id}/network/figure")
def person_network_figure(person_id: str, conn=Depends(get_conn)):
    return build_network_figure_json(_load_network(conn, person_id))


@app.get("/api/people/{person_id}/network/nodes/{node_id}", response_model=schemas.NetworkNodeDetail)
def network_node(person_id: str, node_id: str, conn=Depends(get_conn)):
    node = network.find_node(_load_network(conn, person_id), node_id)
    if node is None:
        raise HTTPException(404, "Person is not part of this network")
    return {
        "person": node["person"],
        "level": node["level"],
        "classification": node["classification"],
        "record_url": f"/api/people/{node['id']}",
    }


# ── Approaches ──

@app.get("/api/approaches", response_model=list[schemas.ApproachOut])
def list_approaches(q: str | None = None, conn=Depends(get_conn)):
    if q is not None:
        return crud.search_approaches(conn, q)
    return crud.list_approaches(conn)


@app.post("/api/approaches", response_model=schemas.ApproachOut)
def create_approach(body: schemas.ApproachCreate, conn=Depends(get_conn)):
    try:
        return crud.create_approach(conn, body.person_ids, body.location.model_dump(), body.timestamp)
    except ValueError as e:
        raise HTTPException(400, str(e))


@app.get("/api/approaches/{approach_id}", response_model=schemas.ApproachOut)
def get_approach(approach_id: str, conn=Depends(get_conn)):
    approach = crud.get_approach(conn, approach_id)
    if approach is None:
        raise HTTPException(404, "Approach not found")
    return approach


@app.put("/api/approaches/{approach_id}", response_model=schemas.ApproachOut)
def update_approach(approach_id: str, body: schemas.ApproachUpdate, conn=Depends(get_conn)):
    location = body.location.model_dump() if body.location is not None else None
    try:
        approach = crud.update_approach(conn, approach_id, location, body.timestamp, body.person_ids)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if approach is None:
        raise HTTPException(404, "Approach not found")
    return approach


@app.delete("/api/approaches/{approach_id}")
def delete_approach(approach_id: str, conn=Depends(get_conn)):
    if not crud.delete_approach(conn, approach_id):
        raise HTTPException(404, "Approach not found")
    return {"ok": True}


# ── Map & geocoding ──

@app.get("/api/map")
def approach_map(conn=Depends(get_conn)):
    return mapview.build_map(crud.list_approaches(conn))


@app.get("/api/geocode/reverse", response_model=schemas.Location)
def reverse_geocode(lat: float = Query(..., ge=-90, le=90), lon: float = Query(..., ge=-180, le=180),
                    geocoder: GeocodingClient = Depends(get_geocoder)):
    try:
        return geocoder.reverse(lat, lon)
    except GeocodingError as e:
        raise HTTPException(502, str(e))


@app.get("/api/geocode/search", response_model=list[schemas.Location])
def search_geocode(q: str, geocoder: GeocodingClient = Depends(get_geocoder)):
    try:
        return geocoder.search(q)
    except GeocodingError as e:
        raise HTTPException(502, str(e))
