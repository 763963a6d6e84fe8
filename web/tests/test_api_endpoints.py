"""Test API endpoints."""

import base64
from io import BytesIO

import pytest
from PIL import Image

NEW_PRODUCT = {
    "name": "Anillo Estrella",
    "category": "Anillos",
    "collection": "Nocturna",
    "price": "11.00 €",
    "material": "Acero inoxidable pulido",
    "description": "Pequeña estrella pulida.",
    "imageUrl": "https://example.com/estrella.jpg",
}


class TestPublicReads:
    """Reads are open to everyone."""

    def test_products_list(self, client):
        response = client.get("/api/products")
        assert response.status_code == 200
        products = response.json["products"]
        assert len(products) == 11
        assert "imageUrl" in products[0]

    def test_single_product(self, client):
        response = client.get("/api/products/4")
        assert response.status_code == 200
        assert response.json["name"] == "Anillo Sello Botánico"

    def test_unknown_product(self, client):
        response = client.get("/api/products/nope")
        assert response.status_code == 404
        assert "error" in response.json

    @pytest.mark.parametrize("kind", ["collections", "categories", "materials"])
    def test_classification_lists(self, client, kind):
        response = client.get(f"/api/{kind}")
        assert response.status_code == 200
        assert isinstance(response.json[kind], list)
        assert len(response.json[kind]) > 0

    def test_collections_start_with_sentinel(self, client):
        assert client.get("/api/collections").json["collections"][0]["name"] == "Todas"

    def test_config(self, client):
        response = client.get("/api/config")
        assert response.json["siteName"] == "Catálogo"

    def test_unknown_kind_is_404(self, client):
        assert client.get("/api/gemstones").status_code == 404


class TestAuthGate:
    def test_write_requires_login(self, client, fake_remote):
        response = client.post("/api/products", json=NEW_PRODUCT)
        assert response.status_code == 401
        assert fake_remote.writes() == []

    def test_non_admin_is_forbidden(self, visitor_client):
        response = visitor_client.delete("/api/products/1")
        assert response.status_code == 403
        assert response.json["error"] == "Acceso denegado"


class TestProductWrites:
    def test_create_assigns_id(self, admin_client, store):
        response = admin_client.post("/api/products", json=NEW_PRODUCT)

        assert response.status_code == 201
        new_id = response.json["id"]
        assert new_id.isdigit()
        created = store.get_product(new_id)
        assert created.image_url == "https://example.com/estrella.jpg"

    def test_create_invalid_is_400(self, admin_client):
        response = admin_client.post("/api/products", json=dict(NEW_PRODUCT, collection="Todas"))
        assert response.status_code == 400
        assert "error" in response.json

    def test_create_non_object_body_is_400(self, admin_client):
        response = admin_client.post("/api/products", json=["not", "an", "object"])
        assert response.status_code == 400

    def test_remote_failure_is_502_and_rolled_back(self, admin_client, store, fake_remote):
        fake_remote.fail_on.add(("upsert", "products"))
        before = store.snapshot()

        response = admin_client.post("/api/products", json=dict(NEW_PRODUCT, id="500"))

        assert response.status_code == 502
        assert response.json["error"] == "Error al guardar el producto. Por favor intenta de nuevo."
        assert store.snapshot() == before

    def test_replace_product(self, admin_client, store):
        body = dict(NEW_PRODUCT, id="ignored")
        response = admin_client.put("/api/products/1", json=body)

        assert response.status_code == 200
        assert store.get_product("1").name == "Anillo Estrella"
        assert store.get_product("ignored") is None

    def test_delete_product(self, admin_client, store):
        assert admin_client.delete("/api/products/2").status_code == 200
        assert store.get_product("2") is None

    def test_delete_unknown_product(self, admin_client):
        assert admin_client.delete("/api/products/nope").status_code == 404


class TestBulkEndpoints:
    def test_bulk_update_all_ok(self, admin_client, store):
        response = admin_client.post(
            "/api/products/bulk-update",
            json={"ids": ["1", "3"], "changes": {"collection": "Orgánica"}},
        )

        assert response.status_code == 200
        assert response.json["ok"] is True
        assert store.get_product("3").collection == "Orgánica"

    def test_bulk_update_partial_failure_is_207(self, admin_client, store, fake_remote):
        fake_remote.fail_keys.add("7")

        response = admin_client.post(
            "/api/products/bulk-update",
            json={"ids": ["1", "3", "7"], "changes": {"price": "1.00 €"}},
        )

        assert response.status_code == 207
        assert sorted(response.json["succeeded"]) == ["1", "3"]
        assert list(response.json["failed"]) == ["7"]
        assert store.get_product("7").price == "16.00 €"

    def test_bulk_update_maps_image_key(self, admin_client, store):
        response = admin_client.post(
            "/api/products/bulk-update",
            json={"ids": ["1"], "changes": {"imageUrl": "https://example.com/new.jpg"}},
        )
        assert response.status_code == 200
        assert store.get_product("1").image_url == "https://example.com/new.jpg"

    def test_bulk_update_requires_ids(self, admin_client):
        response = admin_client.post("/api/products/bulk-update", json={"ids": [], "changes": {"price": "1"}})
        assert response.status_code == 400

    def test_bulk_delete(self, admin_client, store):
        response = admin_client.post("/api/products/bulk-delete", json={"ids": ["1", "2"]})

        assert response.status_code == 200
        assert store.get_product("1") is None and store.get_product("2") is None


class TestClassificationEndpoints:
    def test_add(self, admin_client, store):
        response = admin_client.post("/api/materials", json={"name": "Oro 18k", "description": ""})

        assert response.status_code == 201
        assert "Oro 18k" in [m.name for m in store.materials]

    def test_add_duplicate_is_noop(self, admin_client):
        response = admin_client.post("/api/collections", json={"name": "Aurora"})
        assert response.status_code == 200
        assert response.json["added"] is False

    def test_rename_cascades(self, admin_client, store):
        response = admin_client.put("/api/collections/Aurora", json={"name": "Amanecer", "description": "..."})

        assert response.status_code == 200
        assert response.json["updated"] is True
        assert store.get_product("1").collection == "Amanecer"

    def test_rename_to_taken_name_is_400(self, admin_client):
        response = admin_client.put("/api/categories/Anillos", json={"name": "Aretes"})
        assert response.status_code == 400

    def test_rename_unknown_is_404(self, admin_client):
        response = admin_client.put("/api/categories/Broches", json={"name": "Prendedores"})
        assert response.status_code == 404

    def test_delete_sentinel_is_noop(self, admin_client, store):
        response = admin_client.delete("/api/collections/Todas")
        assert response.status_code == 200
        assert response.json["deleted"] is False
        assert store.collections[0].name == "Todas"

    def test_delete_reassigns(self, admin_client, store):
        response = admin_client.delete("/api/collections/Nocturna")
        assert response.json["deleted"] is True
        assert store.get_product("2").collection == "Aurora"


class TestSiteEndpoints:
    def test_update_config(self, admin_client, store):
        response = admin_client.put(
            "/api/config",
            json={
                "siteName": "The Bright Soul",
                "logoUrl": None,
                "footerText": "© 2025",
                "socialLinks": [{"platform": "Instagram", "url": "https://instagram.com/x"}],
            },
        )

        assert response.status_code == 200
        assert store.site_config.site_name == "The Bright Soul"

    def test_update_config_blank_name(self, admin_client):
        assert admin_client.put("/api/config", json={"siteName": ""}).status_code == 400

    def test_reset_requires_confirm(self, admin_client, fake_remote):
        response = admin_client.post("/api/reset", json={})
        assert response.status_code == 400
        assert fake_remote.writes() == []

    def test_reset(self, admin_client, store):
        admin_client.delete("/api/products/1")

        response = admin_client.post("/api/reset", json={"confirm": True})

        assert response.status_code == 200
        assert store.get_product("1") is not None


class TestImageUpload:
    @staticmethod
    def png_bytes():
        buf = BytesIO()
        Image.new("RGBA", (40, 20), (255, 0, 0, 128)).save(buf, format="PNG")
        return buf.getvalue()

    def test_json_upload(self, admin_client):
        payload = base64.b64encode(self.png_bytes()).decode("ascii")

        response = admin_client.post("/api/images", json={"image": payload})

        assert response.status_code == 200
        assert response.json["dataUrl"].startswith("data:image/jpeg;base64,")

    def test_multipart_upload(self, admin_client):
        response = admin_client.post(
            "/api/images",
            data={"image": (BytesIO(self.png_bytes()), "ring.png")},
            content_type="multipart/form-data",
        )
        assert response.status_code == 200

    def test_invalid_upload(self, admin_client):
        response = admin_client.post("/api/images", json={"image": "bm90IGFuIGltYWdl"})
        assert response.status_code == 400
        assert "error" in response.json
