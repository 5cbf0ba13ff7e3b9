"""
Tests for restaurant, dish and people management plus dashboard stats.
"""

import pytest

from test_fixtures import api_client, db_session, scratch_dir, API


@pytest.mark.parametrize(
    "resource, payload",
    [
        ("restaurants", {"name": "Bistro", "address": "1 Main St", "latitude": "45.5", "longitude": "-73.6"}),
        ("dishes", {"name": "Ramen", "category": "soup"}),
        ("people", {"name": "Dana"}),
    ],
)
def test_crud_round(api_client, resource, payload):
    base = f"{API}/{resource}"

    created = api_client.post(base, json=payload)
    assert created.status_code == 201
    entity_id = created.json()["id"]
    assert created.json()["name"] == payload["name"]

    assert api_client.get(f"{base}/{entity_id}").json()["name"] == payload["name"]
    assert [e["id"] for e in api_client.get(base).json()] == [entity_id]

    renamed = api_client.patch(f"{base}/{entity_id}", json={"name": "Renamed"})
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Renamed"

    assert api_client.delete(f"{base}/{entity_id}").status_code == 204
    assert api_client.get(f"{base}/{entity_id}").status_code == 404
    assert api_client.delete(f"{base}/{entity_id}").status_code == 404


def test_patch_keeps_unset_fields(api_client):
    created = api_client.post(f"{API}/dishes", json={"name": "Tacos", "category": "mexican"}).json()

    updated = api_client.patch(f"{API}/dishes/{created['id']}", json={"name": "Tacos al pastor"})

    assert updated.json()["category"] == "mexican"


def test_search_is_case_insensitive_and_capped(api_client):
    for i in range(12):
        api_client.post(f"{API}/restaurants", json={"name": f"Pizza Place {i}"})
    api_client.post(f"{API}/restaurants", json={"name": "Noodle House"})

    results = api_client.get(f"{API}/restaurants/search", params={"q": "pizza"}).json()

    assert len(results) == 10
    assert all("Pizza" in r["name"] for r in results)


@pytest.mark.parametrize("params", [{}, {"q": ""}, {"q": "   "}])
def test_empty_search_returns_nothing(api_client, params):
    api_client.post(f"{API}/people", json={"name": "Eve"})

    response = api_client.get(f"{API}/people/search", params=params)

    assert response.status_code == 200
    assert response.json() == []


def test_duplicate_person_is_conflict(api_client):
    api_client.post(f"{API}/people", json={"name": "Finn"})

    response = api_client.post(f"{API}/people", json={"name": "Finn"})

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


def test_blank_name_is_rejected(api_client):
    assert api_client.post(f"{API}/dishes", json={"name": ""}).status_code == 422


def test_deleting_restaurant_keeps_meal(api_client, scratch_dir):
    meal = api_client.post(f"{API}/meals", data={"restaurant_name": "Closing Soon"}).json()
    restaurant_id = meal["restaurant"]["id"]

    assert api_client.delete(f"{API}/restaurants/{restaurant_id}").status_code == 204

    reloaded = api_client.get(f"{API}/meals/{meal['id']}").json()
    assert reloaded["restaurant"] is None
    assert reloaded["restaurant_id"] is None


def test_deleting_person_removes_association(api_client, scratch_dir):
    meal = api_client.post(f"{API}/meals", data={"people_names": '["Gus", "Hana"]'}).json()
    gus = next(p for p in meal["people"] if p["name"] == "Gus")

    api_client.delete(f"{API}/people/{gus['id']}")

    reloaded = api_client.get(f"{API}/meals/{meal['id']}").json()
    assert [p["name"] for p in reloaded["people"]] == ["Hana"]


# =============================================================================
# STATS / HEALTH
# =============================================================================


def test_stats_on_empty_database(api_client):
    assert api_client.get(f"{API}/stats").json() == {
        "total_meals": 0,
        "avg_rating": 0.0,
        "unique_restaurants": 0,
        "current_month": 0,
    }


def test_stats_counts_meals(api_client, scratch_dir):
    ratings = {"taste_rating": "3", "presentation_rating": "3", "value_rating": "3", "service_rating": "3"}
    api_client.post(f"{API}/meals", data={"restaurant_name": "A", **ratings})
    api_client.post(f"{API}/meals", data={"restaurant_name": "A"})
    api_client.post(f"{API}/meals", data={"restaurant_name": "B"})
    api_client.post(f"{API}/meals", data={"dish_name": "Nowhere special"})

    stats = api_client.get(f"{API}/stats").json()

    assert stats["total_meals"] == 4
    assert stats["avg_rating"] == 0.8
    assert stats["unique_restaurants"] == 2
    assert stats["current_month"] == 4


def test_health_check(api_client):
    assert api_client.get(f"{API}/health-check").json()["status"] == "ok"
    assert api_client.get(f"{API}/health/db").json() == {"database": "ok"}
