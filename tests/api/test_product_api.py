"""
상품 API 엔드포인트 통합 테스트

관리자 상품 API(multipart/JSON 본문)와 고객 조회 API를 검증합니다.
"""

import json
import uuid

import pytest
from fastapi.testclient import TestClient


ADMIN_URL = "/api/admin/products"
CUSTOMER_URL = "/api/customer/products"


@pytest.fixture
def created(test_client: TestClient, product_data) -> dict:
    """폼 요청으로 생성한 상품 문서"""
    response = test_client.post(ADMIN_URL, data=product_data())
    assert response.status_code == 201
    return response.json()["data"]


class TestAdminProductCreateAPI:
    """관리자 상품 생성 API 테스트 클래스"""

    def test_create_with_images(self, test_client: TestClient, product_data, colors, asset_store):
        """변형 이미지와 함께 생성 (201 Created)"""
        response = test_client.post(
            ADMIN_URL,
            data=product_data(**{"variants[0][imageAlt_0]": "Front view"}),
            files=[
                ("variants[0][image]", ("front-api.jpg", b"front", "image/jpeg")),
                ("variants[0][image]", ("back-api.jpg", b"back", "image/jpeg")),
            ],
        )

        assert response.status_code == 201
        body = response.json()
        assert body["statusCode"] == 201
        assert body["message"] == "Product created successfully"

        product = body["data"]
        assert product["slug"] == "linen-shirt"
        assert product["category"]["slug"] == "shirts"
        assert product["brand"]["name"] == "Northwind"
        assert product["variants"][0]["color"]["_id"] == str(colors["x"].id)

        images = product["variants"][0]["images"]
        assert [image["alt"] for image in images] == ["Front view", "Variant 0 Image 2"]
        assert [image["isPrimary"] for image in images] == [True, False]
        assert images[0]["url"] == f"/uploads/{images[0]['public_id']}"
        assert (asset_store.root / images[0]["public_id"]).read_bytes() == b"front"
        assert product["variants"][1]["images"] == []

    def test_create_with_json_body(self, test_client: TestClient, category, brand, colors):
        response = test_client.post(
            ADMIN_URL,
            json={
                "name": "Wool Coat",
                "category": str(category.id),
                "brand": str(brand.id),
                "base_price": 180,
                "variants": [{"color": str(colors["z"].id), "sizes": [{"size": "L", "quantity": 2}]}],
                "tags": ["Winter", "wool"],
                "isFeatured": True,
            },
        )

        assert response.status_code == 201
        product = response.json()["data"]
        assert product["tags"] == ["winter", "wool"]
        assert product["isFeatured"] is True
        assert product["variants"][0]["sizes"] == [{"size": "L", "quantity": 2}]

    def test_create_missing_name(self, test_client: TestClient, product_data):
        """필수 필드 누락 (422)"""
        data = product_data()
        del data["name"]

        response = test_client.post(ADMIN_URL, data=data)

        assert response.status_code == 422
        assert response.json() == {
            "statusCode": 422,
            "message": "Missing required fields: name",
        }

    def test_create_duplicate_slug(self, test_client: TestClient, product_data, created):
        """같은 slug로 생성 (409 Conflict)"""
        response = test_client.post(ADMIN_URL, data=product_data(name="linen   shirt!"))

        assert response.status_code == 409
        assert response.json()["message"] == "Product with slug 'linen-shirt' already exists"

    def test_create_unknown_category(self, test_client: TestClient, product_data):
        response = test_client.post(ADMIN_URL, data=product_data(category=str(uuid.uuid4())))

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid category ID"

    def test_invalid_json_body(self, test_client: TestClient):
        response = test_client.post(
            ADMIN_URL, content=b"[1, 2]", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Request body must be a JSON object"


class TestAdminProductManageAPI:
    """관리자 상품 조회/수정/삭제 API 테스트 클래스"""

    def test_get_product_counts_view(self, test_client: TestClient, created):
        first = test_client.get(f"{ADMIN_URL}/{created['_id']}")
        second = test_client.get(f"{ADMIN_URL}/{created['_id']}")

        assert first.status_code == 200
        assert first.json()["message"] == "Product fetched successfully"
        assert second.json()["data"]["viewCount"] == 2

    def test_get_product_invalid_id(self, test_client: TestClient):
        response = test_client.get(f"{ADMIN_URL}/12345")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid product ID"

    def test_get_product_not_found(self, test_client: TestClient):
        response = test_client.get(f"{ADMIN_URL}/{uuid.uuid4()}")

        assert response.status_code == 404

    def test_list_includes_hidden(self, test_client: TestClient, make_product):
        make_product("Shown")
        make_product("Hidden", is_visible=False)

        response = test_client.get(ADMIN_URL)

        assert response.status_code == 200
        assert response.json()["data"]["pagination"]["totalItems"] == 2

    def test_search_requires_term(self, test_client: TestClient):
        response = test_client.get(f"{ADMIN_URL}/search")

        assert response.status_code == 400
        assert response.json()["message"] == "Search term is required"

    def test_update_name_and_variant(self, test_client: TestClient, created):
        variant = created["variants"][0]

        response = test_client.put(
            f"{ADMIN_URL}/{created['_id']}",
            json={
                "name": "Linen Shirt Relaxed",
                "variants": [{"_id": variant["_id"], "price": 59.9}],
                "isVisible": False,
            },
        )

        assert response.status_code == 200
        product = response.json()["data"]
        assert response.json()["message"] == "Product updated successfully"
        assert product["slug"] == "linen-shirt-relaxed"
        assert product["isVisible"] is False
        assert product["variants"][0]["price"] == 59.9
        assert product["variants"][0]["_id"] == variant["_id"]
        assert len(product["variants"]) == 2

    def test_update_foreign_variant(self, test_client: TestClient, created):
        response = test_client.put(
            f"{ADMIN_URL}/{created['_id']}",
            data={"variants": json.dumps([{"_id": str(uuid.uuid4()), "price": 1}])},
        )

        assert response.status_code == 400
        assert "does not belong to this product" in response.json()["message"]

    def test_delete_product(self, test_client: TestClient, created, category, test_db):
        response = test_client.delete(f"{ADMIN_URL}/{created['_id']}")

        assert response.status_code == 200
        assert response.json() == {"statusCode": 200, "message": "Product deleted successfully"}
        assert test_client.get(f"{ADMIN_URL}/{created['_id']}").status_code == 404
        test_db.refresh(category)
        assert category.product_count == 0


class TestCustomerProductAPI:
    """고객 상품 조회 API 테스트 클래스"""

    def test_list_visible_products(self, test_client: TestClient, make_product):
        make_product("Shown")
        make_product("Hidden", is_visible=False)

        response = test_client.get(CUSTOMER_URL)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Products fetched successfully"
        assert [p["name"] for p in body["data"]["products"]] == ["Shown"]

    def test_invalid_filter(self, test_client: TestClient):
        response = test_client.get(CUSTOMER_URL, params={"minPrice": "50", "maxPrice": "10"})

        assert response.status_code == 400
        assert response.json()["message"] == "Minimum price cannot be greater than maximum price"

    def test_page_out_of_range(self, test_client: TestClient):
        response = test_client.get(CUSTOMER_URL, params={"page": "100000000000000000000"})

        assert response.status_code == 400
        assert response.json() == {"statusCode": 400, "message": "Page number is out of range"}

    def test_non_finite_price(self, test_client: TestClient):
        response = test_client.get(f"{CUSTOMER_URL}/filter", params={"minPrice": "nan"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid minPrice value: nan"

    def test_filter_response_shape(self, test_client: TestClient, make_product):
        make_product("Shown", tags=["linen"])

        response = test_client.get(f"{CUSTOMER_URL}/filter", params={"tags": "Linen"})

        data = response.json()["data"]
        assert [p["name"] for p in data["products"]] == ["Shown"]
        assert data["relatedProducts"] == []
        assert data["appliedFilters"]["tags"] == ["linen"]
        assert data["appliedFilters"]["category"] is None

    def test_new_arrivals_not_found(self, test_client: TestClient):
        response = test_client.get(f"{CUSTOMER_URL}/new-arrivals")

        assert response.status_code == 404
        assert response.json() == {"statusCode": 404, "message": "No products found"}

    def test_new_arrivals_without_category(self, test_client: TestClient, make_product):
        make_product("Fresh", tags=["new"])

        response = test_client.get(
            f"{CUSTOMER_URL}/new-arrivals", params={"includeCategory": "false"}
        )

        assert response.status_code == 200
        assert "category" not in response.json()["data"][0]

    def test_deals_of_the_month(self, test_client: TestClient, make_product):
        make_product("Deal", is_featured=True, discount=20)

        response = test_client.get(f"{CUSTOMER_URL}/dealsofthemonth")

        assert response.status_code == 200
        assert response.json()["message"] == "Products fetched successfully for Deals of the Month"
        assert response.json()["data"][0]["discount"] == 20

    def test_all_filters(self, test_client: TestClient, make_product):
        make_product("Shown")

        response = test_client.get(f"{CUSTOMER_URL}/allfilters")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["sizes"] == ["M"]
        assert data["priceRange"] == {"min": 10.0, "max": 10.0}

    def test_hidden_product_not_found(self, test_client: TestClient, make_product):
        product = make_product("Hidden", is_visible=False)

        response = test_client.get(f"{CUSTOMER_URL}/{product.id}")

        assert response.status_code == 404
        assert response.json()["statusCode"] == 404
