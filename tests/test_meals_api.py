"""
End-to-end tests for the meal and image endpoints.

Scenarios:
- Create with and without a photo (QOI storage, downscaling)
- Upload rejections (415 by MIME type and by content, 413 by size)
- QOI failure falls back to the original bytes and still serves
- Image serving: 404 without payload, 500 when undecodable, ETag/304
- Update (photo replace/delete, people replace) and delete (legacy files)
- List filters
"""

import json

import pytest

from test_fixtures import (
    api_client,
    db_session,
    scratch_dir,
    legacy_dir,
    API,
    make_jpeg,
    make_png,
    open_png,
    b64,
    NOT_AN_IMAGE,
)
from api.dependencies import get_storage_policy, get_pixel_codec
from app.config import settings
from domain.models import Meal, Person
from services.image import ImageStoragePolicy, PixelCodecAdapter
from main import app

MEALS = f"{API}/meals"
IMAGES = f"{API}/images"


def create_meal(client, data=None, photo=None):
    files = {"photo": photo} if photo else None
    return client.post(MEALS, data=data or {}, files=files)


def jpeg_photo(width=64, height=48, name="lunch.jpg"):
    return (name, make_jpeg(width, height), "image/jpeg")


# =============================================================================
# CREATE
# =============================================================================


def test_create_meal_without_photo(api_client, scratch_dir):
    response = create_meal(
        api_client,
        {
            "restaurant_name": "Trattoria",
            "dish_name": "Carbonara",
            "price": "12.50",
            "taste_rating": "3",
            "service_rating": "-1",
            "people_names": json.dumps(["Ana", "Ben"]),
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["restaurant"]["name"] == "Trattoria"
    assert body["dish"]["name"] == "Carbonara"
    assert [p["name"] for p in body["people"]] == ["Ana", "Ben"]
    assert body["taste_rating"] == 3
    assert body["service_rating"] == -1
    assert body["has_image"] is False
    assert body["image_url"] is None


def test_create_meal_reuses_existing_catalog_entries(api_client, db_session, scratch_dir):
    create_meal(api_client, {"restaurant_name": "Diner", "people_names": '["Ana"]'})
    second = create_meal(api_client, {"restaurant_name": "Diner", "people_names": '["Ana", "Ana"]'})

    assert second.status_code == 201
    assert len(second.json()["people"]) == 1
    assert db_session.query(Person).count() == 1


def test_create_meal_with_large_jpeg_is_downscaled(api_client, scratch_dir):
    response = create_meal(api_client, photo=jpeg_photo(3000, 2000))

    assert response.status_code == 201
    body = response.json()
    assert body["has_image"] is True
    assert body["image_encoding"] == "qoi"
    assert body["image_width"] == 1920
    assert abs(body["image_width"] / body["image_height"] - 1.5) < 0.015
    assert body["image_url"] == f"{IMAGES}/{body['id']}"
    assert "image_data" not in body

    image = api_client.get(body["image_url"])
    assert image.status_code == 200
    assert image.headers["content-type"] == "image/png"
    assert open_png(image.content).size == (body["image_width"], body["image_height"])
    assert list(scratch_dir.iterdir()) == []


def test_small_png_is_stored_at_original_size(api_client, scratch_dir):
    response = create_meal(api_client, photo=("dessert.png", make_png(40, 30), "image/png"))

    body = response.json()
    assert (body["image_width"], body["image_height"]) == (40, 30)
    assert open_png(api_client.get(body["image_url"]).content).size == (40, 30)


# =============================================================================
# UPLOAD REJECTIONS
# =============================================================================


def test_text_file_with_image_name_is_rejected(api_client, db_session, scratch_dir):
    response = create_meal(
        api_client,
        {"restaurant_name": "Nowhere"},
        photo=("notes.jpg", NOT_AN_IMAGE, "image/jpeg"),
    )

    assert response.status_code == 415
    assert response.json()["success"] is False
    assert db_session.query(Meal).count() == 0
    assert list(scratch_dir.iterdir()) == []


def test_non_image_mime_type_is_rejected(api_client, db_session, scratch_dir):
    response = create_meal(api_client, photo=("notes.txt", b"hello", "text/plain"))

    assert response.status_code == 415
    assert response.json()["error"]["message"] == "Only image files are allowed"
    assert db_session.query(Meal).count() == 0


def test_oversized_upload_is_rejected(api_client, db_session, scratch_dir, monkeypatch):
    monkeypatch.setattr(settings, "image_max_upload_bytes", 256)

    response = create_meal(api_client, photo=jpeg_photo(400, 300))

    assert response.status_code == 413
    assert response.json()["error"]["code"] == "PAYLOAD_TOO_LARGE"
    assert db_session.query(Meal).count() == 0
    assert list(scratch_dir.iterdir()) == []


def test_invalid_people_names_is_rejected(api_client, db_session, scratch_dir):
    response = create_meal(api_client, {"people_names": "Ana, Ben"})

    assert response.status_code == 400
    assert db_session.query(Meal).count() == 0


def test_rating_out_of_range_is_rejected(api_client, scratch_dir):
    response = create_meal(api_client, {"taste_rating": "4"})
    assert response.status_code == 422


# =============================================================================
# FALLBACK STORAGE
# =============================================================================


def test_codec_failure_stores_original_and_still_serves(api_client, scratch_dir):
    def failing_encoder(pixels):
        raise RuntimeError("QOI unavailable")

    app.dependency_overrides[get_storage_policy] = lambda: ImageStoragePolicy(
        PixelCodecAdapter(encoder=failing_encoder)
    )

    response = create_meal(api_client, photo=jpeg_photo(64, 48))

    assert response.status_code == 201
    body = response.json()
    assert body["image_encoding"] == "raw"
    assert (body["image_width"], body["image_height"]) == (64, 48)

    image = api_client.get(body["image_url"])
    assert image.status_code == 200
    assert open_png(image.content).size == (64, 48)


# =============================================================================
# IMAGE SERVING
# =============================================================================


def test_image_for_meal_without_photo_is_404(api_client, scratch_dir):
    meal_id = create_meal(api_client, {"dish_name": "Soup"}).json()["id"]

    response = api_client.get(f"{IMAGES}/{meal_id}")

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Image not found"


def test_image_for_unknown_meal_is_404(api_client):
    assert api_client.get(f"{IMAGES}/9999").status_code == 404


@pytest.mark.parametrize("encoding", [None, "qoi", "raw"])
def test_undecodable_payload_is_500(api_client, db_session, encoding):
    meal = Meal(image_data=b64(NOT_AN_IMAGE), image_width=10, image_height=10, image_encoding=encoding)
    db_session.add(meal)
    db_session.commit()

    response = api_client.get(f"{IMAGES}/{meal.id}")

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "IMAGE_DECODE_ERROR"


def test_wildcard_if_none_match_does_not_hide_decode_failure(api_client, db_session):
    meal = Meal(image_data=b64(NOT_AN_IMAGE), image_width=10, image_height=10, image_encoding="qoi")
    db_session.add(meal)
    db_session.commit()

    response = api_client.get(f"{IMAGES}/{meal.id}", headers={"If-None-Match": "*"})

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "IMAGE_DECODE_ERROR"


def test_wildcard_if_none_match_on_valid_image_is_304(api_client, scratch_dir):
    meal_id = create_meal(api_client, photo=jpeg_photo()).json()["id"]

    response = api_client.get(f"{IMAGES}/{meal_id}", headers={"If-None-Match": "*"})

    assert response.status_code == 304
    assert response.headers["etag"]


def test_legacy_untagged_rows_are_served(api_client, db_session):
    compact = get_pixel_codec().encode(make_png(6, 6)).data
    qoi_row = Meal(image_data=compact, image_width=6, image_height=6)
    raw_row = Meal(image_data=b64(make_jpeg(8, 8)), image_width=8, image_height=8)
    db_session.add_all([qoi_row, raw_row])
    db_session.commit()

    assert open_png(api_client.get(f"{IMAGES}/{qoi_row.id}").content).size == (6, 6)
    assert open_png(api_client.get(f"{IMAGES}/{raw_row.id}").content).size == (8, 8)


def test_image_revalidation_with_etag(api_client, scratch_dir):
    meal_id = create_meal(api_client, photo=jpeg_photo()).json()["id"]

    first = api_client.get(f"{IMAGES}/{meal_id}")
    etag = first.headers["etag"]
    assert first.headers["cache-control"] == settings.image_cache_control
    assert "immutable" not in first.headers["cache-control"]

    cached = api_client.get(f"{IMAGES}/{meal_id}", headers={"If-None-Match": etag})
    assert cached.status_code == 304
    assert cached.content == b""

    other = api_client.get(f"{IMAGES}/{meal_id}", headers={"If-None-Match": '"stale"'})
    assert other.status_code == 200


# =============================================================================
# UPDATE
# =============================================================================


def test_replacing_photo_changes_served_image(api_client, scratch_dir):
    meal_id = create_meal(api_client, photo=jpeg_photo(64, 48)).json()["id"]
    old_etag = api_client.get(f"{IMAGES}/{meal_id}").headers["etag"]

    response = api_client.patch(
        f"{MEALS}/{meal_id}",
        files={"photo": ("new.png", make_png(20, 20), "image/png")},
    )

    assert response.status_code == 200
    assert (response.json()["image_width"], response.json()["image_height"]) == (20, 20)
    image = api_client.get(f"{IMAGES}/{meal_id}")
    assert image.headers["etag"] != old_etag
    assert open_png(image.content).size == (20, 20)


def test_delete_image_flag_clears_photo(api_client, scratch_dir, legacy_dir):
    meal_id = create_meal(api_client, photo=jpeg_photo()).json()["id"]

    response = api_client.patch(f"{MEALS}/{meal_id}", data={"delete_image": "true"})

    assert response.status_code == 200
    body = response.json()
    assert body["has_image"] is False
    assert body["image_width"] is None
    assert body["image_encoding"] is None
    assert api_client.get(f"{IMAGES}/{meal_id}").status_code == 404


def test_rejected_photo_leaves_meal_untouched(api_client, scratch_dir):
    meal_id = create_meal(api_client, photo=jpeg_photo(64, 48)).json()["id"]

    response = api_client.patch(
        f"{MEALS}/{meal_id}",
        data={"description": "changed"},
        files={"photo": ("notes.jpg", NOT_AN_IMAGE, "image/jpeg")},
    )

    assert response.status_code == 415
    body = api_client.get(f"{MEALS}/{meal_id}").json()
    assert body["description"] is None
    assert (body["image_width"], body["image_height"]) == (64, 48)


def test_update_replaces_people_and_fields(api_client, scratch_dir):
    meal_id = create_meal(
        api_client, {"people_names": '["Ana", "Ben"]', "taste_rating": "1"}
    ).json()["id"]

    response = api_client.patch(
        f"{MEALS}/{meal_id}",
        data={"people_names": '["Cleo"]', "taste_rating": "-2", "want_again": "true"},
    )

    body = response.json()
    assert [p["name"] for p in body["people"]] == ["Cleo"]
    assert body["taste_rating"] == -2
    assert body["want_again"] is True


def test_update_unknown_meal_is_404(api_client):
    response = api_client.patch(f"{MEALS}/9999", data={"description": "x"})
    assert response.status_code == 404


def test_new_photo_removes_legacy_file(api_client, db_session, scratch_dir, legacy_dir):
    (legacy_dir / "old.jpg").write_bytes(make_jpeg())
    meal = Meal(photo_url="/uploads/old.jpg")
    db_session.add(meal)
    db_session.commit()

    response = api_client.patch(f"{MEALS}/{meal.id}", files={"photo": jpeg_photo()})

    assert response.status_code == 200
    assert response.json()["photo_url"] is None
    assert not (legacy_dir / "old.jpg").exists()


# =============================================================================
# DELETE
# =============================================================================


def test_delete_meal(api_client, scratch_dir, legacy_dir):
    meal_id = create_meal(api_client, photo=jpeg_photo()).json()["id"]

    assert api_client.delete(f"{MEALS}/{meal_id}").status_code == 204
    assert api_client.get(f"{MEALS}/{meal_id}").status_code == 404
    assert api_client.get(f"{IMAGES}/{meal_id}").status_code == 404


def test_delete_with_missing_legacy_file_succeeds(api_client, db_session, legacy_dir):
    meal = Meal(photo_url="/uploads/never-existed.jpg")
    db_session.add(meal)
    db_session.commit()

    assert api_client.delete(f"{MEALS}/{meal.id}").status_code == 204
    assert db_session.query(Meal).count() == 0


def test_delete_removes_existing_legacy_file(api_client, db_session, legacy_dir):
    (legacy_dir / "pic.jpg").write_bytes(b"x")
    meal = Meal(photo_url="/uploads/pic.jpg")
    db_session.add(meal)
    db_session.commit()

    assert api_client.delete(f"{MEALS}/{meal.id}").status_code == 204
    assert not (legacy_dir / "pic.jpg").exists()


def test_delete_unknown_meal_is_404(api_client):
    assert api_client.delete(f"{MEALS}/9999").status_code == 404


# =============================================================================
# LIST
# =============================================================================


def test_list_filters_by_search_and_rating(api_client, scratch_dir):
    create_meal(api_client, {"restaurant_name": "Sushi Bar", "taste_rating": "3"})
    create_meal(api_client, {"dish_name": "Pho", "service_rating": "-2"})
    create_meal(api_client, {"description": "plain toast", "is_excellent": "true"})

    everything = api_client.get(MEALS).json()
    assert len(everything) == 3

    sushi = api_client.get(MEALS, params={"search": "sushi"}).json()
    assert [m["restaurant"]["name"] for m in sushi] == ["Sushi Bar"]

    high = api_client.get(MEALS, params={"rating": "high"}).json()
    assert len(high) == 1 and high[0]["taste_rating"] == 3

    low = api_client.get(MEALS, params={"rating": "low"}).json()
    assert len(low) == 1 and low[0]["dish"]["name"] == "Pho"

    excellent = api_client.get(MEALS, params={"rating": "excellent"}).json()
    assert [m["description"] for m in excellent] == ["plain toast"]

    assert api_client.get(MEALS, params={"rating": "amazing"}).status_code == 422


def test_list_is_newest_first_and_paginated(api_client, scratch_dir):
    ids = [create_meal(api_client, {"description": f"meal {i}"}).json()["id"] for i in range(3)]

    listed = [m["id"] for m in api_client.get(MEALS).json()]
    assert listed == list(reversed(ids))

    page = api_client.get(MEALS, params={"limit": 1, "offset": 1}).json()
    assert [m["id"] for m in page] == [ids[1]]
