from decimal import Decimal

from bledor.models.favorite import Favorite
from tests.conftest import auth

BAGUETTE = {"name": "Baguette tradition", "price": "1.20", "category": "pain", "description": "Levain naturel"}


def test_staff_manage_catalog(client, manager):
    resp = client.post("/products", json=BAGUETTE, headers=auth(manager))
    assert resp.status_code == 201, resp.text
    product = resp.json()
    assert Decimal(product["price"]) == Decimal("1.20")
    assert product["is_available"] is True

    update = dict(BAGUETTE, price="1.30", category="pain")
    resp = client.put(f"/products/{product['id']}", json=update, headers=auth(manager))
    assert resp.status_code == 200
    assert Decimal(resp.json()["price"]) == Decimal("1.30")

    resp = client.patch(f"/products/{product['id']}/availability", json={"is_available": False},
                        headers=auth(manager))
    assert resp.json()["is_available"] is False

    assert client.delete(f"/products/{product['id']}", headers=auth(manager)).status_code == 204
    assert client.get(f"/products/{product['id']}", headers=auth(manager)).status_code == 404


def test_catalog_writes_need_staff(client, customer):
    assert client.post("/products", json=BAGUETTE).status_code == 401
    assert client.post("/products", json=BAGUETTE, headers=auth(customer)).status_code == 403
    assert client.get("/products", headers=auth(customer)).status_code == 403


def test_product_validation(client, manager):
    assert client.post("/products", json=dict(BAGUETTE, price="-1"), headers=auth(manager)).status_code == 422
    assert client.post("/products", json=dict(BAGUETTE, name=""), headers=auth(manager)).status_code == 422


def test_public_listing_hides_unavailable(client, db, manager, bread, croissant):
    croissant.is_available = False
    db.commit()

    public = client.get("/products/public").json()
    assert [p["id"] for p in public] == ["bread-1"]
    assert client.get("/products/public", params={"category": "viennoiserie"}).json() == []

    # Unavailable products are hidden from the storefront but not from staff
    assert client.get("/products/croissant-1").status_code == 404
    assert client.get("/products/croissant-1", headers=auth(manager)).status_code == 200
    assert len(client.get("/products", headers=auth(manager)).json()) == 2


def test_search_and_categories(client, manager, bread, croissant):
    found = client.get("/products", params={"q": "croiss"}, headers=auth(manager)).json()
    assert [p["id"] for p in found] == ["croissant-1"]
    assert client.get("/products/categories").json() == ["pain", "viennoiserie"]


def test_delete_product_drops_favorites(client, db, manager, customer, bread):
    client.post("/favorites", json={"product_id": "bread-1"}, headers=auth(customer))
    assert db.query(Favorite).count() == 1

    assert client.delete("/products/bread-1", headers=auth(manager)).status_code == 204
    assert db.query(Favorite).count() == 0


def test_unknown_product(client, manager):
    resp = client.put("/products/ghost", json=BAGUETTE, headers=auth(manager))
    assert resp.status_code == 404
    assert resp.json()["code"] == "ProductNotFound"
