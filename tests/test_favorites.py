from tests.conftest import auth


def test_favorites_roundtrip(client, customer, bread, croissant):
    headers = auth(customer)
    assert client.post("/favorites", json={"product_id": "bread-1"}, headers=headers).status_code == 200
    # Adding twice is a no-op
    assert client.post("/favorites", json={"product_id": "bread-1"}, headers=headers).status_code == 200
    client.post("/favorites", json={"product_id": "croissant-1"}, headers=headers)

    favorites = client.get("/favorites", headers=headers).json()
    assert sorted(f["product"]["id"] for f in favorites) == ["bread-1", "croissant-1"]

    assert client.delete("/favorites/bread-1", headers=headers).json()["success"] is True
    favorites = client.get("/favorites", headers=headers).json()
    assert [f["product"]["id"] for f in favorites] == ["croissant-1"]


def test_favorites_are_per_user(client, customer, manager, bread):
    client.post("/favorites", json={"product_id": "bread-1"}, headers=auth(customer))
    assert client.get("/favorites", headers=auth(manager)).json() == []


def test_favorite_unknown_product(client, customer):
    resp = client.post("/favorites", json={"product_id": "ghost"}, headers=auth(customer))
    assert resp.status_code == 404


def test_favorites_need_login(client):
    assert client.get("/favorites").status_code == 401
