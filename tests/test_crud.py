"""Tests for fieldstop/crud.py: people, vehicles, approaches."""
import pytest
from fieldstop import crud


# ── People ──

class TestCreatePerson:
    def test_defaults(self, conn):
        p = crud.create_person(conn, "Test Person")
        assert p["name"] == "Test Person"
        assert p["cpf"] is None
        assert p["photos"] == []
        assert p["vehicles"] == []

    def test_all_fields(self, conn):
        p = crud.create_person(
            conn, "Full Person", mother_name="Mother", father_name="Father",
            birth_date="1990-01-15", rg="12.345.678-9", cpf="529.982.247-25",
            address="Rua X, 10", profile_photo="photos/p.jpg", notes="Some notes",
            photos=["photos/1.jpg", "photos/2.jpg"],
        )
        assert p["mother_name"] == "Mother"
        assert p["birth_date"] == "1990-01-15"
        assert p["cpf"] == "529.982.247-25"
        assert p["photos"] == ["photos/1.jpg", "photos/2.jpg"]
        assert p["notes"] == "Some notes"

    def test_unnamed(self, conn):
        p = crud.create_person(conn)
        assert p["name"] is None

    def test_unknown_field(self, conn):
        with pytest.raises(ValueError):
            crud.create_person(conn, "X", nickname="nope")


class TestListPeople:
    def test_empty(self, conn):
        assert crud.list_people(conn) == []

    def test_ordered(self, conn):
        crud.create_person(conn, "Zara")
        crud.create_person(conn, "alice")
        crud.create_person(conn)
        names = [p["name"] for p in crud.list_people(conn)]
        assert names == ["alice", "Zara", None]

    def test_includes_vehicles(self, conn, person_ana):
        crud.add_vehicle(conn, person_ana["id"], "Fiat", "Uno", "Red")
        people = crud.list_people(conn)
        assert people[0]["vehicles"][0]["model"] == "Uno"


class TestGetPerson:
    def test_found(self, conn, person_ana):
        p = crud.get_person(conn, person_ana["id"])
        assert p["name"] == "Ana Souza"

    def test_not_found(self, conn):
        assert crud.get_person(conn, "nonexistent") is None


class TestUpdatePerson:
    def test_partial(self, conn, person_ana):
        p = crud.update_person(conn, person_ana["id"], notes="Seen twice")
        assert p["notes"] == "Seen twice"
        assert p["mother_name"] == "Maria Souza"

    def test_photos(self, conn, person_ana):
        p = crud.update_person(conn, person_ana["id"], photos=["a.jpg"])
        assert p["photos"] == ["a.jpg"]

    def test_clear_field(self, conn, person_ana):
        p = crud.update_person(conn, person_ana["id"], cpf=None)
        assert p["cpf"] is None

    def test_not_found(self, conn):
        assert crud.update_person(conn, "nonexistent", name="X") is None


class TestDeletePerson:
    def test_delete(self, conn, person_ana):
        assert crud.delete_person(conn, person_ana["id"]) is True
        assert crud.get_person(conn, person_ana["id"]) is None

    def test_removes_vehicles(self, conn, person_ana):
        v = crud.add_vehicle(conn, person_ana["id"], "VW", "Gol", "Black")
        crud.delete_person(conn, person_ana["id"])
        assert crud.delete_vehicle(conn, v["id"]) is False

    def test_removes_participation(self, conn, chain):
        crud.delete_person(conn, chain["bruno"]["id"])
        approach = crud.get_approach(conn, chain["e1"]["id"])
        assert [p["id"] for p in approach["people"]] == [chain["ana"]["id"]]

    def test_not_found(self, conn):
        assert crud.delete_person(conn, "nonexistent") is False


class TestSearchPeople:
    def test_by_name_case_insensitive(self, conn, person_ana, person_bruno):
        results = crud.search_people(conn, "ana s")
        assert [p["id"] for p in results] == [person_ana["id"]]

    def test_by_parent_name(self, conn, person_ana, person_bruno):
        results = crud.search_people(conn, "carlos")
        assert [p["id"] for p in results] == [person_bruno["id"]]

    def test_by_document(self, conn, person_ana, person_bruno):
        assert len(crud.search_people(conn, "529.982")) == 1
        assert len(crud.search_people(conn, "345.678")) == 1

    def test_empty_query_lists_everyone(self, conn, person_ana, person_bruno):
        results = crud.search_people(conn, "   ")
        assert [p["id"] for p in results] == [person_ana["id"], person_bruno["id"]]


# ── Vehicles ──

class TestVehicles:
    def test_add_and_list(self, conn, person_ana):
        crud.add_vehicle(conn, person_ana["id"], "Fiat", "Uno", "Red")
        crud.add_vehicle(conn, person_ana["id"], "VW", "Gol", "Black")
        vehicles = crud.list_vehicles(conn, person_ana["id"])
        assert [v["make"] for v in vehicles] == ["Fiat", "VW"]

    def test_add_to_missing_person(self, conn):
        with pytest.raises(ValueError):
            crud.add_vehicle(conn, "nonexistent", "Fiat", "Uno", "Red")

    def test_delete(self, conn, person_ana):
        v = crud.add_vehicle(conn, person_ana["id"], "Fiat", "Uno", "Red")
        assert crud.delete_vehicle(conn, v["id"]) is True
        assert crud.list_vehicles(conn, person_ana["id"]) == []


# ── Approaches ──

class TestCreateApproach:
    def test_basic(self, conn, person_ana, person_bruno):
        a = crud.create_approach(
            conn, [person_ana["id"], person_bruno["id"]],
            {"street": "Rua A", "street_number": "12", "district": "Centro",
             "latitude": -23.5, "longitude": -46.6},
            "2024-05-01T08:30:00+00:00",
        )
        assert a["timestamp"] == "2024-05-01T08:30:00+00:00"
        assert a["location"]["street_number"] == "12"
        assert a["location"]["latitude"] == pytest.approx(-23.5)
        assert [p["id"] for p in a["people"]] == [person_ana["id"], person_bruno["id"]]

    def test_without_coordinates(self, conn, person_ana):
        a = crud.create_approach(conn, [person_ana["id"]], {"street": "Rua A"})
        assert a["location"]["latitude"] is None
        assert a["location"]["longitude"] is None
        assert a["timestamp"]

    def test_coordinates_stored_exactly(self, conn, person_ana):
        a = crud.create_approach(conn, [person_ana["id"]],
                                 {"latitude": -23.561684123456, "longitude": -46})
        assert a["location"]["latitude"] == -23.561684123456
        assert a["location"]["longitude"] == -46.0
        a = crud.update_approach(conn, a["id"], location={"latitude": 1.5, "longitude": "2.25"})
        assert (a["location"]["latitude"], a["location"]["longitude"]) == (1.5, 2.25)

    def test_duplicate_participants_collapsed(self, conn, person_ana):
        a = crud.create_approach(conn, [person_ana["id"], person_ana["id"]])
        assert len(a["people"]) == 1

    def test_requires_people(self, conn):
        with pytest.raises(ValueError):
            crud.create_approach(conn, [])

    def test_unknown_person(self, conn, person_ana):
        with pytest.raises(ValueError, match="Unknown person"):
            crud.create_approach(conn, [person_ana["id"], "ghost"])


class TestListApproaches:
    def test_newest_first(self, conn, chain):
        ids = [a["id"] for a in crud.list_approaches(conn)]
        assert ids == [chain["e3"]["id"], chain["e2"]["id"], chain["e1"]["id"]]

    def test_people_resolved(self, conn, chain):
        approaches = {a["id"]: a for a in crud.list_approaches(conn)}
        people = approaches[chain["e1"]["id"]]["people"]
        assert [p["name"] for p in people] == ["Ana Souza", "Bruno Lima"]

    def test_by_person(self, conn, chain):
        ids = [a["id"] for a in crud.list_approaches_by_person(conn, chain["bruno"]["id"])]
        assert ids == [chain["e2"]["id"], chain["e1"]["id"]]


class TestUpdateApproach:
    def test_location(self, conn, chain):
        a = crud.update_approach(conn, chain["e3"]["id"], location={
            "street": "Rua Nova", "district": "Lapa", "latitude": -23.52, "longitude": -46.70,
        })
        assert a["location"]["street"] == "Rua Nova"
        assert a["location"]["latitude"] == pytest.approx(-23.52)

    def test_clear_coordinates(self, conn, chain):
        a = crud.update_approach(conn, chain["e1"]["id"], location={"street": "Rua A"})
        assert a["location"]["latitude"] is None

    def test_replace_people(self, conn, chain):
        a = crud.update_approach(conn, chain["e1"]["id"],
                                 person_ids=[chain["davi"]["id"], chain["ana"]["id"]])
        assert [p["id"] for p in a["people"]] == [chain["davi"]["id"], chain["ana"]["id"]]

    def test_timestamp_only_keeps_people(self, conn, chain):
        a = crud.update_approach(conn, chain["e1"]["id"], timestamp="2023-12-31T23:00:00+00:00")
        assert a["timestamp"] == "2023-12-31T23:00:00+00:00"
        assert len(a["people"]) == 2

    def test_empty_people_rejected(self, conn, chain):
        with pytest.raises(ValueError):
            crud.update_approach(conn, chain["e1"]["id"], person_ids=[])

    def test_not_found(self, conn):
        assert crud.update_approach(conn, "nonexistent", timestamp="2024-01-01") is None


class TestDeleteApproach:
    def test_delete(self, conn, chain):
        assert crud.delete_approach(conn, chain["e1"]["id"]) is True
        assert crud.get_approach(conn, chain["e1"]["id"]) is None
        assert crud.get_person(conn, chain["ana"]["id"]) is not None

    def test_not_found(self, conn):
        assert crud.delete_approach(conn, "nonexistent") is False


class TestSearchApproaches:
    def test_by_district(self, conn, chain):
        results = crud.search_approaches(conn, "moema")
        assert [a["id"] for a in results] == [chain["e2"]["id"]]

    def test_by_participant(self, conn, chain):
        results = crud.search_approaches(conn, "davi")
        assert [a["id"] for a in results] == [chain["e3"]["id"]]

    def test_by_parent_name(self, conn, chain):
        results = crud.search_approaches(conn, "maria souza")
        assert [a["id"] for a in results] == [chain["e1"]["id"]]

    def test_empty_query_lists_all(self, conn, chain):
        assert len(crud.search_approaches(conn, "")) == 3
