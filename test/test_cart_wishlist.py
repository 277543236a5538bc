from storefront.models.cart import CartItem, WishlistItem


def test_add_to_cart_merges_lines(client, customer_headers, make_product):
    product = make_product(price="250", stock=5, image_url="https://img.example/p.jpg")

    first = client.post("/api/cart", json={"product_id": product.id, "quantity": 2}, headers=customer_headers)
    assert first.status_code == 201
    assert first.json()["data"]["product"]["images"][0]["image_url"] == "https://img.example/p.jpg"

    second = client.post("/api/cart", json={"product_id": product.id, "quantity": 3}, headers=customer_headers)
    assert second.json()["data"]["quantity"] == 5
    assert second.json()["data"]["id"] == first.json()["data"]["id"]

    over = client.post("/api/cart", json={"product_id": product.id}, headers=customer_headers)
    assert over.status_code == 400
    assert over.json()["message"] == "Cannot add more. Only 5 units available"


def test_add_to_cart_rejections(client, customer_headers, make_product):
    inactive = make_product(is_active=False)
    scarce = make_product(stock=1)

    assert client.post("/api/cart", json={}, headers=customer_headers).json()["message"] == "Product ID is required"
    assert client.post("/api/cart", json={"product_id": 999}, headers=customer_headers).status_code == 404
    assert client.post("/api/cart", json={"product_id": inactive.id}, headers=customer_headers).status_code == 404

    zero = client.post("/api/cart", json={"product_id": scarce.id, "quantity": 0}, headers=customer_headers)
    assert zero.json()["message"] == "Quantity must be at least 1"

    too_many = client.post("/api/cart", json={"product_id": scarce.id, "quantity": 2}, headers=customer_headers)
    assert too_many.json()["message"] == "Only 1 units available in stock"


def test_get_cart_summary(client, customer_headers, make_product):
    cheap = make_product(price="99.50", stock=10)
    dear = make_product(price="1200", stock=10)
    client.post("/api/cart", json={"product_id": cheap.id, "quantity": 2}, headers=customer_headers)
    client.post("/api/cart", json={"product_id": dear.id, "quantity": 1}, headers=customer_headers)

    data = client.get("/api/cart", headers=customer_headers).json()["data"]
    assert len(data["items"]) == 2
    assert data["summary"] == {"total_items": 3, "subtotal": 1399.0, "estimated_total": 1399.0}


def test_update_and_remove_cart_line(client, customer_headers, make_product):
    product = make_product(stock=4)
    line_id = client.post("/api/cart", json={"product_id": product.id}, headers=customer_headers).json()["data"]["id"]

    updated = client.put(f"/api/cart/{line_id}", json={"quantity": 4}, headers=customer_headers)
    assert updated.json()["data"]["quantity"] == 4

    too_many = client.put(f"/api/cart/{line_id}", json={"quantity": 5}, headers=customer_headers)
    assert too_many.json()["message"] == "Only 4 units available in stock"

    invalid = client.put(f"/api/cart/{line_id}", json={"quantity": 0}, headers=customer_headers)
    assert invalid.json()["message"] == "Valid quantity is required"

    assert client.delete(f"/api/cart/{line_id}", headers=customer_headers).status_code == 200
    assert client.get("/api/cart", headers=customer_headers).json()["data"]["items"] == []


def test_cart_lines_are_private(client, make_user, headers_for, customer_headers, make_product):
    product = make_product()
    line_id = client.post("/api/cart", json={"product_id": product.id}, headers=customer_headers).json()["data"]["id"]
    other = headers_for(make_user(email="other@example.com"))

    assert client.put(f"/api/cart/{line_id}", json={"quantity": 1}, headers=other).status_code == 404
    assert client.delete(f"/api/cart/{line_id}", headers=other).status_code == 404
    assert client.get("/api/cart", headers=other).json()["data"]["items"] == []


def test_clear_cart(client, db, customer, customer_headers, make_product):
    for _ in range(2):
        client.post("/api/cart", json={"product_id": make_product().id}, headers=customer_headers)

    assert client.delete("/api/cart", headers=customer_headers).status_code == 200
    assert db.query(CartItem).filter(CartItem.user_id == customer.id).count() == 0


def test_wishlist_add_list_remove(client, customer_headers, make_product):
    product = make_product()
    added = client.post("/api/wishlist", json={"product_id": product.id}, headers=customer_headers)
    assert added.status_code == 201

    duplicate = client.post("/api/wishlist", json={"product_id": product.id}, headers=customer_headers)
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Product already in wishlist"

    listed = client.get("/api/wishlist", headers=customer_headers).json()["data"]
    assert [entry["product_id"] for entry in listed] == [product.id]

    entry_id = added.json()["data"]["id"]
    assert client.delete(f"/api/wishlist/{entry_id}", headers=customer_headers).status_code == 200
    assert client.delete(f"/api/wishlist/{entry_id}", headers=customer_headers).status_code == 404


def test_clear_wishlist(client, db, customer, customer_headers, make_product):
    client.post("/api/wishlist", json={"product_id": make_product().id}, headers=customer_headers)
    client.post("/api/wishlist", json={"product_id": make_product().id}, headers=customer_headers)
    client.delete("/api/wishlist", headers=customer_headers)
    assert db.query(WishlistItem).filter(WishlistItem.user_id == customer.id).count() == 0


def test_move_to_cart(client, db, customer, customer_headers, make_product):
    product = make_product(stock=3)
    entry_id = client.post("/api/wishlist", json={"product_id": product.id}, headers=customer_headers).json()["data"]["id"]
    client.post("/api/cart", json={"product_id": product.id, "quantity": 1}, headers=customer_headers)

    moved = client.post(f"/api/wishlist/{entry_id}/move-to-cart", json={"quantity": 2}, headers=customer_headers)
    assert moved.status_code == 200
    assert moved.json()["data"]["quantity"] == 3
    assert db.query(WishlistItem).filter(WishlistItem.user_id == customer.id).count() == 0


def test_move_to_cart_defaults_to_one(client, customer_headers, make_product):
    product = make_product(stock=3)
    entry_id = client.post("/api/wishlist", json={"product_id": product.id}, headers=customer_headers).json()["data"]["id"]
    moved = client.post(f"/api/wishlist/{entry_id}/move-to-cart", headers=customer_headers)
    assert moved.json()["data"]["quantity"] == 1


def test_move_to_cart_out_of_stock_keeps_entry(client, db, customer, customer_headers, make_product):
    product = make_product(stock=0)
    entry_id = client.post("/api/wishlist", json={"product_id": product.id}, headers=customer_headers).json()["data"]["id"]

    response = client.post(f"/api/wishlist/{entry_id}/move-to-cart", headers=customer_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Product out of stock"
    assert db.query(WishlistItem).filter(WishlistItem.user_id == customer.id).count() == 1


def test_move_to_cart_respects_merged_quantity(client, db, customer, customer_headers, make_product):
    product = make_product(stock=2)
    entry_id = client.post("/api/wishlist", json={"product_id": product.id}, headers=customer_headers).json()["data"]["id"]
    client.post("/api/cart", json={"product_id": product.id, "quantity": 2}, headers=customer_headers)

    response = client.post(f"/api/wishlist/{entry_id}/move-to-cart", headers=customer_headers)
    assert response.status_code == 400
    assert db.query(WishlistItem).filter(WishlistItem.user_id == customer.id).count() == 1
