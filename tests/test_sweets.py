"""Catalogue endpoints: list, search, CRUD, categories and low stock."""

import pytest

from conftest import (
    OLD_TIMESTAMP, age_sweet, create_sweet, get_quantity, get_updated_at, set_role
)

SWEETS_URL = "/api/sweets"


def sweet_payload(**overrides):
    payload = {
        "name": "Gummy Bears",
        "category": "Gummies",
        "price": 1.75,
        "quantity": 40,
        "description": "Fruit flavoured gummy bears",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def catalogue():
    return {
        "chocolate": create_sweet("Chocolate Bar", "Chocolate", 2.5, 10),
        "dark": create_sweet("Dark Chocolate Truffle", "Chocolate", 4.0, 2),
        "gummy": create_sweet("Gummy Bears", "Gummies", 1.75, 40),
        "lollipop": create_sweet("Lollipop", "Hard Candy", 0.5, 0),
    }


class TestListSweets:

    def test_requires_authentication(self, client):
        response = client.get(SWEETS_URL)

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Access token is required"

    def test_empty_catalogue(self, client, user_headers):
        response = client.get(SWEETS_URL, headers=user_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"] == []
        assert body["total"] == 0
        assert body["has_more"] is False

    def test_newest_first(self, client, user_headers, catalogue):
        response = client.get(SWEETS_URL, headers=user_headers)

        ids = [sweet["id"] for sweet in response.json()["data"]]
        assert ids == sorted(catalogue.values(), reverse=True)

    def test_pagination(self, client, user_headers, catalogue):
        response = client.get(SWEETS_URL, params={"page": 2, "limit": 3}, headers=user_headers)

        body = response.json()
        assert len(body["data"]) == 1
        assert body["total"] == 4
        assert body["page"] == 2
        assert body["per_page"] == 3
        assert body["has_more"] is False

    def test_stock_flag(self, client, user_headers, catalogue):
        response = client.get(SWEETS_URL, headers=user_headers)

        by_id = {sweet["id"]: sweet for sweet in response.json()["data"]}
        assert by_id[catalogue["lollipop"]]["is_in_stock"] is False
        assert by_id[catalogue["gummy"]]["is_in_stock"] is True


class TestSearchSweets:

    def search(self, client, headers, **params):
        response = client.get(f"{SWEETS_URL}/search", params=params, headers=headers)
        assert response.status_code == 200, response.text
        return {sweet["name"] for sweet in response.json()["data"]}

    def test_by_name_is_case_insensitive(self, client, user_headers, catalogue):
        assert self.search(client, user_headers, name="CHOCOLATE") == {
            "Chocolate Bar", "Dark Chocolate Truffle"
        }

    def test_by_category(self, client, user_headers, catalogue):
        assert self.search(client, user_headers, category="gumm") == {"Gummy Bears"}

    def test_by_price_range_is_inclusive(self, client, user_headers, catalogue):
        assert self.search(client, user_headers, minPrice=1.75, maxPrice=2.5) == {
            "Chocolate Bar", "Gummy Bears"
        }

    def test_min_price_only(self, client, user_headers, catalogue):
        assert self.search(client, user_headers, minPrice=3) == {"Dark Chocolate Truffle"}

    def test_filters_combine(self, client, user_headers, catalogue):
        assert self.search(client, user_headers, category="chocolate", maxPrice=3) == {"Chocolate Bar"}

    def test_no_filters_returns_everything(self, client, user_headers, catalogue):
        assert len(self.search(client, user_headers, limit=100)) == 4

    def test_wildcards_are_literal(self, client, user_headers, catalogue):
        create_sweet("100% Cocoa", "Chocolate", 5.0, 3)

        assert self.search(client, user_headers, name="%") == {"100% Cocoa"}
        assert self.search(client, user_headers, name="_") == set()

    def test_default_page_size(self, client, user_headers):
        for i in range(12):
            create_sweet(f"Candy {i:02d}", "Candy", 1.0, 1)

        response = client.get(f"{SWEETS_URL}/search", headers=user_headers)

        body = response.json()
        assert len(body["data"]) == 10
        assert body["total"] == 12
        assert body["has_more"] is True

    def test_min_price_above_max_price(self, client, user_headers):
        response = client.get(
            f"{SWEETS_URL}/search", params={"minPrice": 5, "maxPrice": 1}, headers=user_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "minPrice cannot be greater than maxPrice"

    def test_negative_price_is_rejected(self, client, user_headers):
        response = client.get(f"{SWEETS_URL}/search", params={"minPrice": -1}, headers=user_headers)

        assert response.status_code == 400

    def test_search_is_not_mistaken_for_an_id(self, client, user_headers):
        response = client.get(f"{SWEETS_URL}/search", headers=user_headers)

        assert response.status_code == 200


class TestGetSweet:

    def test_get_existing(self, client, user_headers, sweet_id):
        response = client.get(f"{SWEETS_URL}/{sweet_id}", headers=user_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == sweet_id
        assert data["name"] == "Chocolate Bar"
        assert data["price"] == 2.5
        assert data["quantity"] == 10

    def test_get_missing(self, client, user_headers):
        response = client.get(f"{SWEETS_URL}/999", headers=user_headers)

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Sweet not found"

    def test_get_malformed_id(self, client, user_headers):
        response = client.get(f"{SWEETS_URL}/not-an-id", headers=user_headers)

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "validation_error"


class TestCreateSweet:

    def test_admin_creates_sweet(self, client, admin_headers):
        response = client.post(SWEETS_URL, json=sweet_payload(), headers=admin_headers)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "Gummy Bears"
        assert data["price"] == 1.75
        assert data["quantity"] == 40
        assert data["is_in_stock"] is True
        assert get_quantity(data["id"]) == 40

    def test_user_cannot_create(self, client, user_headers):
        response = client.post(SWEETS_URL, json=sweet_payload(), headers=user_headers)

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Admin access required"

    def test_demoted_admin_loses_write_access(self, client, admin_id, admin_headers):
        set_role(admin_id, "user")

        response = client.post(SWEETS_URL, json=sweet_payload(), headers=admin_headers)

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Admin access required"

    @pytest.mark.parametrize("raw_price", ["1e400", "-1e400"])
    def test_non_finite_price(self, client, admin_headers, raw_price):
        body = (
            '{"name": "Gummy Bears", "category": "Gummies", '
            f'"price": {raw_price}, "quantity": 1}}'
        )

        response = client.post(
            SWEETS_URL,
            content=body,
            headers={**admin_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert any(detail.startswith("price") for detail in response.json()["error"]["details"])

    def test_duplicate_name(self, client, admin_headers, sweet_id):
        response = client.post(SWEETS_URL, json=sweet_payload(name="Chocolate Bar"), headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["error"]["message"] == "Sweet with this name already exists"

    def test_name_is_trimmed(self, client, admin_headers):
        response = client.post(SWEETS_URL, json=sweet_payload(name="  Fudge  "), headers=admin_headers)

        assert response.status_code == 201
        assert response.json()["data"]["name"] == "Fudge"

    def test_description_is_optional(self, client, admin_headers):
        payload = sweet_payload()
        del payload["description"]

        response = client.post(SWEETS_URL, json=payload, headers=admin_headers)

        assert response.status_code == 201
        assert response.json()["data"]["description"] is None

    @pytest.mark.parametrize("field, value", [
        ("price", 0),
        ("price", -1),
        ("price", "free"),
        ("price", 100_000_000),
        ("quantity", -1),
        ("quantity", 1.5),
        ("quantity", "10"),
        ("quantity", 2_147_483_648),
        ("quantity", 10**20),
        ("name", "A"),
        ("name", "x" * 101),
        ("category", ""),
        ("description", "x" * 501),
    ])
    def test_invalid_fields(self, client, admin_headers, field, value):
        response = client.post(SWEETS_URL, json=sweet_payload(**{field: value}), headers=admin_headers)

        assert response.status_code == 400
        assert any(detail.startswith(field) for detail in response.json()["error"]["details"])

    @pytest.mark.parametrize("field", ["name", "category", "price", "quantity"])
    def test_missing_required_field(self, client, admin_headers, field):
        payload = sweet_payload()
        del payload[field]

        response = client.post(SWEETS_URL, json=payload, headers=admin_headers)

        assert response.status_code == 400


class TestUpdateSweet:

    def test_partial_update(self, client, admin_headers, sweet_id):
        response = client.put(f"{SWEETS_URL}/{sweet_id}", json={"price": 3.0}, headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["price"] == 3.0
        assert data["name"] == "Chocolate Bar"
        assert data["quantity"] == 10

    def test_update_refreshes_updated_at(self, client, admin_headers, sweet_id):
        age_sweet(sweet_id)

        response = client.put(f"{SWEETS_URL}/{sweet_id}", json={"quantity": 12}, headers=admin_headers)

        assert response.status_code == 200
        assert get_updated_at(sweet_id) > OLD_TIMESTAMP

    def test_infinite_price(self, client, admin_headers, sweet_id):
        response = client.put(
            f"{SWEETS_URL}/{sweet_id}",
            content='{"price": 1e400}',
            headers={**admin_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400

    @pytest.mark.parametrize("body", [
        {"price": 100_000_000},
        {"quantity": 2_147_483_648},
    ])
    def test_out_of_range_values(self, client, admin_headers, sweet_id, body):
        response = client.put(f"{SWEETS_URL}/{sweet_id}", json=body, headers=admin_headers)

        assert response.status_code == 400
        assert get_quantity(sweet_id) == 10

    def test_clear_description(self, client, admin_headers, sweet_id):
        response = client.put(f"{SWEETS_URL}/{sweet_id}", json={"description": None}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["data"]["description"] is None

    def test_null_required_field_is_ignored(self, client, admin_headers, sweet_id):
        response = client.put(f"{SWEETS_URL}/{sweet_id}", json={"name": None}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Chocolate Bar"

    def test_rename_to_existing_name(self, client, admin_headers, sweet_id):
        create_sweet("Gummy Bears", "Gummies", 1.75, 40)

        response = client.put(f"{SWEETS_URL}/{sweet_id}", json={"name": "Gummy Bears"}, headers=admin_headers)

        assert response.status_code == 409

    def test_keep_own_name(self, client, admin_headers, sweet_id):
        response = client.put(
            f"{SWEETS_URL}/{sweet_id}", json={"name": "Chocolate Bar", "quantity": 3}, headers=admin_headers
        )

        assert response.status_code == 200
        assert get_quantity(sweet_id) == 3

    def test_negative_quantity(self, client, admin_headers, sweet_id):
        response = client.put(f"{SWEETS_URL}/{sweet_id}", json={"quantity": -1}, headers=admin_headers)

        assert response.status_code == 400
        assert get_quantity(sweet_id) == 10

    def test_update_missing(self, client, admin_headers):
        response = client.put(f"{SWEETS_URL}/999", json={"price": 1.0}, headers=admin_headers)

        assert response.status_code == 404

    def test_user_cannot_update(self, client, user_headers, sweet_id):
        response = client.put(f"{SWEETS_URL}/{sweet_id}", json={"price": 0.1}, headers=user_headers)

        assert response.status_code == 403


class TestDeleteSweet:

    def test_admin_deletes(self, client, admin_headers, user_headers, sweet_id):
        response = client.delete(f"{SWEETS_URL}/{sweet_id}", headers=admin_headers)

        assert response.status_code == 204
        assert response.content == b""
        assert client.get(f"{SWEETS_URL}/{sweet_id}", headers=user_headers).status_code == 404

    def test_delete_missing(self, client, admin_headers):
        response = client.delete(f"{SWEETS_URL}/999", headers=admin_headers)

        assert response.status_code == 404

    def test_user_cannot_delete(self, client, user_headers, sweet_id):
        response = client.delete(f"{SWEETS_URL}/{sweet_id}", headers=user_headers)

        assert response.status_code == 403
        assert get_quantity(sweet_id) == 10


class TestCategories:

    def test_distinct_sorted(self, client, user_headers, catalogue):
        response = client.get(f"{SWEETS_URL}/categories", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["data"] == ["Chocolate", "Gummies", "Hard Candy"]


class TestLowStock:

    def test_default_threshold(self, client, admin_headers, catalogue):
        response = client.get(f"{SWEETS_URL}/low-stock", headers=admin_headers)

        assert response.status_code == 200
        names = [sweet["name"] for sweet in response.json()["data"]]
        assert names == ["Lollipop", "Dark Chocolate Truffle"]

    def test_custom_threshold(self, client, admin_headers, catalogue):
        response = client.get(f"{SWEETS_URL}/low-stock", params={"threshold": 10}, headers=admin_headers)

        assert response.json()["total"] == 3

    def test_admin_only(self, client, user_headers, catalogue):
        response = client.get(f"{SWEETS_URL}/low-stock", headers=user_headers)

        assert response.status_code == 403
