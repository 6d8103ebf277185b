from app.stock.history.models import StockHistory


def test_update_is_partial(client, make_product):
    product = make_product(name="Lamp", price=20.0, stock=4)

    response = client.put(f"/products/{product.id_product}", json={"price": "12.5"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Produit mis à jour avec succès"
    assert body["product"]["price"] == 12.5
    assert body["product"]["name"] == "Lamp"
    assert body["product"]["stock"] == 4


def test_update_overwrites_with_falsy_values(client, make_product):
    product = make_product(stock=9)

    body = client.put(
        f"/products/{product.id_product}",
        json={"stock": 0, "description": ""},
    ).json()

    assert body["product"]["stock"] == 0
    assert body["product"]["description"] == ""


def test_update_does_not_touch_stock_history(client, make_product, db):
    product = make_product(stock=2)

    client.put(f"/products/{product.id_product}", json={"stock": 10})

    assert db.query(StockHistory).count() == 1


def test_update_rejects_bad_numbers(client, make_product):
    product = make_product()

    for payload in ({"price": "abc"}, {"stock": "1.5"}, {"id_category": None}, {"price": -3}, {"stock": 2 ** 40}):
        response = client.put(f"/products/{product.id_product}", json=payload)

        assert response.status_code == 400


def test_update_rejects_null_name(client, make_product):
    product = make_product()

    response = client.put(f"/products/{product.id_product}", json={"name": None})

    assert response.status_code == 400


def test_update_rejects_unknown_category(client, make_product):
    product = make_product()

    response = client.put(f"/products/{product.id_product}", json={"id_category": 42})

    assert response.status_code == 400
    assert "42" in response.json()["message"]


def test_update_missing_or_deleted_is_404(client, make_product):
    deleted = make_product(is_deleted=True)

    for product_id in (deleted.id_product, 999):
        response = client.put(f"/products/{product_id}", json={"name": "New"})

        assert response.status_code == 404
        assert response.json() == {"message": "Produit non trouvé."}


def test_soft_delete(client, make_product):
    product = make_product(name="Kettle")
    make_product(name="Toaster")

    response = client.delete(f"/products/{product.id_product}")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Produit supprimé avec succès"
    assert body["product"]["id_product"] == product.id_product
    assert body["product"]["is_deleted"] is True

    assert client.get(f"/products/{product.id_product}").status_code == 404

    listed = client.get("/products").json()
    assert product.id_product not in [p["id_product"] for p in listed["data"]]
    assert listed["total"] == 2

    assert client.get("/products/search", params={"query": "kettle"}).json() == []


def test_second_delete_is_404(client, make_product):
    product = make_product()

    assert client.delete(f"/products/{product.id_product}").status_code == 200
    response = client.delete(f"/products/{product.id_product}")

    assert response.status_code == 404
    assert response.json() == {"message": "Produit non trouvé."}


def test_update_rejects_booleans_as_numbers(client, make_product):
    product = make_product(price=20.0, stock=4)

    for payload in ({"stock": True}, {"price": True}, {"id_category": False}):
        response = client.put(f"/products/{product.id_product}", json=payload)

        assert response.status_code == 400
        assert response.json()["success"] is False

    body = client.get(f"/products/{product.id_product}").json()
    assert body["stock"] == 4
    assert body["price"] == 20.0


def test_update_without_body_keeps_product(client, make_product):
    product = make_product(name="Lamp", price=20.0, stock=4)

    response = client.put(f"/products/{product.id_product}")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["product"]["name"] == "Lamp"
    assert body["product"]["price"] == 20.0
    assert body["product"]["stock"] == 4


def test_update_and_delete_out_of_range_id_is_404(client):
    product_id = "99999999999999999999"

    for response in (
        client.put(f"/products/{product_id}", json={"name": "New"}),
        client.delete(f"/products/{product_id}"),
    ):
        assert response.status_code == 404
        assert response.json() == {"message": "Produit non trouvé."}
