from storefront.models.order import Order, OrderItem
from storefront.models.product import Product, ProductImage


# Categories

def test_category_hierarchy_rules(client, admin_headers):
    root = client.post("/api/categories", json={"name": "Health Care", "level": 1}, headers=admin_headers)
    assert root.status_code == 201
    root_data = root.json()["data"]
    assert root_data["slug"] == "health-care"

    orphan = client.post("/api/categories", json={"name": "Orphan", "level": 2}, headers=admin_headers)
    assert orphan.status_code == 400
    assert orphan.json()["message"] == "Parent category is required for level 2"

    wrong_parent = client.post(
        "/api/categories", json={"name": "Deep", "level": 3, "parent_id": root_data["id"]}, headers=admin_headers
    )
    assert wrong_parent.status_code == 400
    assert wrong_parent.json()["message"] == "Parent must be level 2 for level 3 category"

    child = client.post(
        "/api/categories", json={"name": "Vitamins", "level": 2, "parent_id": root_data["id"]}, headers=admin_headers
    )
    assert child.status_code == 201
    assert child.json()["data"]["parent"]["id"] == root_data["id"]

    bad_level = client.post("/api/categories", json={"name": "Nope", "level": 4}, headers=admin_headers)
    assert bad_level.json()["message"] == "Level must be 1, 2, or 3"


def test_category_slug_conflict_and_format(client, admin_headers, make_category):
    make_category(name="Skin", slug="skin")
    duplicate = client.post("/api/categories", json={"name": "Skin", "level": 1}, headers=admin_headers)
    assert duplicate.status_code == 409

    bad = client.post("/api/categories", json={"name": "Hair", "slug": "Hair Care!", "level": 1}, headers=admin_headers)
    assert bad.status_code == 400


def test_category_tree_hides_inactive_children(client, make_category):
    root = make_category(name="Wellness", slug="wellness")
    make_category(name="Active Child", slug="active-child", level=2, parent=root)
    make_category(name="Hidden Child", slug="hidden-child", level=2, parent=root, is_active=False)
    make_category(name="Hidden Root", slug="hidden-root", is_active=False)

    response = client.get("/api/categories/tree")
    tree = response.json()["data"]
    assert [node["slug"] for node in tree] == ["wellness"]
    assert [child["slug"] for child in tree[0]["children"]] == ["active-child"]
    assert tree[0]["children"][0]["children"] == []


def test_category_listing_counts(client, make_category, make_product):
    root = make_category(name="Wellness", slug="wellness")
    make_category(name="Child", slug="child", level=2, parent=root)
    make_product(category=root)
    make_product(category=root)

    listed = {c["slug"]: c for c in client.get("/api/categories").json()["data"]}
    assert listed["wellness"]["product_count"] == 2
    assert listed["wellness"]["children_count"] == 1
    assert listed["child"]["parent"]["slug"] == "wellness"

    level_two = client.get("/api/categories", params={"level": 2}).json()["data"]
    assert [c["slug"] for c in level_two] == ["child"]


def test_category_by_slug(client, make_category):
    make_category(name="Wellness", slug="wellness")
    assert client.get("/api/categories/slug/wellness").json()["data"]["name"] == "Wellness"
    assert client.get("/api/categories/slug/missing").status_code == 404


def test_category_update_keeps_zero_display_order(client, admin_headers, make_category):
    category = make_category(name="Wellness", slug="wellness", display_order=3)
    response = client.put(
        f"/api/categories/{category.id}",
        json={"display_order": 0, "name": None, "description": "All things well"},
        headers=admin_headers,
    )
    data = response.json()["data"]
    assert data["display_order"] == 0
    assert data["name"] == "Wellness"
    assert data["description"] == "All things well"

    own_parent = client.put(f"/api/categories/{category.id}", json={"parent_id": category.id}, headers=admin_headers)
    assert own_parent.json()["message"] == "Category cannot be its own parent"


def test_category_delete_guards(client, admin_headers, make_category, make_product):
    root = make_category(name="Wellness", slug="wellness")
    child = make_category(name="Child", slug="child", level=2, parent=root)
    make_product(category=child)

    blocked_children = client.delete(f"/api/categories/{root.id}", headers=admin_headers)
    assert blocked_children.status_code == 400
    assert "subcategories" in blocked_children.json()["message"]

    blocked_products = client.delete(f"/api/categories/{child.id}", headers=admin_headers)
    assert blocked_products.json()["message"] == "Cannot delete category with 1 products. Remove products first."

    empty = make_category(name="Empty", slug="empty")
    assert client.delete(f"/api/categories/{empty.id}", headers=admin_headers).status_code == 200


def test_category_writes_need_admin(client, customer_headers):
    response = client.post("/api/categories", json={"name": "X", "level": 1}, headers=customer_headers)
    assert response.status_code == 403


# Brands

def test_brand_crud(client, admin_headers):
    created = client.post(
        "/api/brands", json={"name": "Nature's Bounty", "country_of_origin": "USA"}, headers=admin_headers
    )
    assert created.status_code == 201
    brand = created.json()["data"]
    assert brand["slug"] == "natures-bounty"
    assert brand["is_active"] is True
    assert brand["is_featured"] is False

    updated = client.put(f"/api/brands/{brand['id']}", json={"is_featured": True}, headers=admin_headers)
    assert updated.json()["data"]["is_featured"] is True

    featured = client.get("/api/brands/featured").json()["data"]
    assert [b["id"] for b in featured] == [brand["id"]]

    assert client.get("/api/brands/slug/natures-bounty").json()["data"]["product_count"] == 0
    assert client.delete(f"/api/brands/{brand['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/brands/{brand['id']}", headers=admin_headers).status_code == 404


def test_brand_filters(client, make_brand):
    make_brand(name="Dabur", country_of_origin="India")
    make_brand(name="Blackmores", country_of_origin="Australia", is_active=False)

    indian = client.get("/api/brands", params={"country_of_origin": "India"}).json()["data"]
    assert [b["name"] for b in indian] == ["Dabur"]
    active = client.get("/api/brands", params={"is_active": True}).json()["data"]
    assert [b["name"] for b in active] == ["Dabur"]


def test_brand_with_products_cannot_be_deleted(client, admin_headers, make_brand, make_product):
    brand = make_brand()
    make_product(brand=brand)
    response = client.delete(f"/api/brands/{brand.id}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot delete brand with 1 products. Remove products first."


# Products

def test_create_product_with_images_and_specs(client, admin_headers, make_brand, make_category):
    brand = make_brand()
    category = make_category()
    response = client.post(
        "/api/products",
        json={
            "name": "Vitamin C 500mg",
            "price": 750,
            "original_price": 1000,
            "cost_price": 400,
            "sku": "VITC-500",
            "brand_id": brand.id,
            "category_id": category.id,
            "stock_quantity": 3,
            "features": ["Immune support"],
            "images": [
                {"image_url": "https://img.example/1.jpg", "is_primary": True},
                {"image_url": "https://img.example/2.jpg"},
            ],
            "specifications": [{"key": "Count", "value": "60 tablets"}],
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["slug"] == "vitamin-c-500mg"
    assert data["cost_price"] == 400.0
    assert data["discount_percentage"] == 25
    assert data["stock_status"] == "low_stock"
    assert data["brand"]["id"] == brand.id
    assert [img["display_order"] for img in data["images"]] == [1, 2]
    assert data["specifications"][0]["key"] == "Count"


def test_create_product_validation(client, admin_headers, make_product):
    make_product(slug="taken", sku="SKU-1")
    assert client.post("/api/products", json={"price": 10}, headers=admin_headers).json()["message"] == (
        "Product name is required"
    )
    assert client.post("/api/products", json={"name": "Free", "price": 0}, headers=admin_headers).status_code == 400
    assert client.post("/api/products", json={"name": "X", "slug": "taken", "price": 5}, headers=admin_headers).status_code == 409
    assert client.post("/api/products", json={"name": "Y", "sku": "SKU-1", "price": 5}, headers=admin_headers).status_code == 409
    missing_brand = client.post("/api/products", json={"name": "Z", "price": 5, "brand_id": 999}, headers=admin_headers)
    assert missing_brand.status_code == 404
    assert missing_brand.json()["message"] == "Brand not found"


def test_public_listing_filters_and_pagination(client, make_product, make_brand):
    brand = make_brand()
    make_product(name="Zinc Tablets", price="300", brand=brand)
    make_product(name="Omega Oil", price="1500", stock=0)
    make_product(name="Hidden Thing", price="100", is_active=False)
    make_product(name="Aloe Gel", price="900", short_description="Soothing zinc-free gel")

    listing = client.get("/api/products").json()["data"]
    assert listing["pagination"] == {"page": 1, "limit": 12, "total": 3, "total_pages": 1}
    assert "Hidden Thing" not in [p["name"] for p in listing["data"]]

    search = client.get("/api/products", params={"search": "ZINC"}).json()["data"]["data"]
    assert sorted(p["name"] for p in search) == ["Aloe Gel", "Zinc Tablets"]

    in_stock = client.get("/api/products", params={"in_stock": True}).json()["data"]["data"]
    assert "Omega Oil" not in [p["name"] for p in in_stock]

    ranged = client.get("/api/products", params={"min_price": 500, "max_price": 1000}).json()["data"]["data"]
    assert [p["name"] for p in ranged] == ["Aloe Gel"]

    by_brand = client.get("/api/products", params={"brand_id": brand.id}).json()["data"]["data"]
    assert [p["name"] for p in by_brand] == ["Zinc Tablets"]

    cheapest_first = client.get("/api/products", params={"sort_by": "price", "sort_order": "asc"}).json()["data"]
    assert [p["name"] for p in cheapest_first["data"]] == ["Zinc Tablets", "Aloe Gel", "Omega Oil"]

    paged = client.get("/api/products", params={"limit": 2, "page": 2}).json()["data"]
    assert paged["pagination"]["total_pages"] == 2
    assert len(paged["data"]) == 1


def test_listing_rejects_unknown_sort(client):
    response = client.get("/api/products", params={"sort_by": "password"})
    assert response.status_code == 400


def test_popularity_sort_uses_units_sold(client, db, customer, make_product):
    slow = make_product(name="Slow Seller")
    fast = make_product(name="Fast Seller")
    make_product(name="Never Sold")

    order = Order(
        order_number="ORD-2026-001",
        user_id=customer.id,
        subtotal=0,
        total=0,
        shipping_full_name="A",
        shipping_phone="1",
        shipping_address_line1="B",
        shipping_city="Pokhara",
        shipping_postal_code="33700",
        payment_method="cod",
    )
    order.items.append(OrderItem(product_id=slow.id, product_name=slow.name, price=500, quantity=1, subtotal=500))
    order.items.append(OrderItem(product_id=fast.id, product_name=fast.name, price=500, quantity=5, subtotal=2500))
    db.add(order)
    db.commit()

    ranked = client.get("/api/products", params={"sort_by": "popularity"}).json()["data"]["data"]
    assert [p["name"] for p in ranked][:2] == ["Fast Seller", "Slow Seller"]


def test_product_by_slug(client, make_product, make_category):
    root = make_category(name="Wellness", slug="wellness")
    child = make_category(name="Vitamins", slug="vitamins", level=2, parent=root)
    make_product(slug="vitamin-c", category=child)
    make_product(slug="retired", is_active=False)

    detail = client.get("/api/products/slug/vitamin-c").json()["data"]
    assert detail["category"]["parent"]["slug"] == "wellness"
    assert "cost_price" not in detail

    retired = client.get("/api/products/slug/retired")
    assert retired.status_code == 404
    assert retired.json()["message"] == "Product not available"


def test_update_product(client, admin_headers, make_product):
    product = make_product(slug="old-slug")
    response = client.put(
        f"/api/products/{product.id}",
        json={"price": 650, "stock_quantity": 0, "slug": "new-slug", "name": ""},
        headers=admin_headers,
    )
    data = response.json()["data"]
    assert data["price"] == 650.0
    assert data["stock_quantity"] == 0
    assert data["stock_status"] == "out_of_stock"
    assert data["slug"] == "new-slug"
    assert data["name"] == product.name

    negative = client.put(f"/api/products/{product.id}", json={"stock_quantity": -1}, headers=admin_headers)
    assert negative.json()["message"] == "Stock quantity cannot be negative"


def test_delete_product_keeps_order_history(client, db, admin_headers, customer, make_product):
    product = make_product()
    order = Order(
        order_number="ORD-2026-001",
        user_id=customer.id,
        subtotal=500,
        total=500,
        shipping_full_name="A",
        shipping_phone="1",
        shipping_address_line1="B",
        shipping_city="Pokhara",
        shipping_postal_code="33700",
        payment_method="cod",
    )
    order.items.append(OrderItem(product_id=product.id, product_name=product.name, price=500, quantity=1, subtotal=500))
    db.add(order)
    db.commit()

    name = product.name
    assert client.delete(f"/api/products/{product.id}", headers=admin_headers).status_code == 200

    db.expire_all()
    item = db.query(OrderItem).one()
    assert item.product_id is None
    assert item.product_name == name


def test_image_management(client, db, admin_headers, make_product):
    product = make_product(image_url="https://img.example/a.jpg")
    first_id = product.images[0].id

    added = client.post(
        f"/api/products/{product.id}/images",
        json={"images": [{"image_url": "https://img.example/b.jpg", "is_primary": True}]},
        headers=admin_headers,
    )
    assert added.status_code == 201
    second_id = added.json()["data"][0]["id"]

    images = client.get(f"/api/products/{product.id}/images").json()["data"]
    assert [img["id"] for img in images if img["is_primary"]] == [second_id]

    client.patch(f"/api/products/{product.id}/images/{first_id}/primary", headers=admin_headers)
    db.expire_all()
    primaries = db.query(ProductImage).filter(ProductImage.product_id == product.id, ProductImage.is_primary.is_(True))
    assert [img.id for img in primaries] == [first_id]

    reordered = client.put(
        f"/api/products/{product.id}/images/reorder",
        json={"image_orders": [{"image_id": first_id, "display_order": 9}, {"image_id": second_id, "display_order": 1}]},
        headers=admin_headers,
    )
    assert [img["id"] for img in reordered.json()["data"]] == [second_id, first_id]

    alt = client.put(
        f"/api/products/{product.id}/images/{second_id}", json={"alt_text": "Back label"}, headers=admin_headers
    )
    assert alt.json()["data"]["alt_text"] == "Back label"

    assert client.delete(f"/api/products/{product.id}/images/{second_id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/products/{product.id}/images/{second_id}", headers=admin_headers).status_code == 404


def test_image_must_belong_to_product(client, admin_headers, make_product):
    owner = make_product(image_url="https://img.example/a.jpg")
    other = make_product()
    image_id = owner.images[0].id
    response = client.patch(f"/api/products/{other.id}/images/{image_id}/primary", headers=admin_headers)
    assert response.status_code == 404


def test_specification_management(client, admin_headers, make_product):
    product = make_product()
    added = client.post(
        f"/api/products/{product.id}/specifications",
        json={"specifications": [{"key": "Form", "value": "Tablet"}, {"key": "Count", "value": "60"}]},
        headers=admin_headers,
    )
    assert added.status_code == 201
    spec_id = added.json()["data"][0]["id"]

    updated = client.put(
        f"/api/products/{product.id}/specifications/{spec_id}", json={"value": "Capsule"}, headers=admin_headers
    )
    assert updated.json()["data"] == {"id": spec_id, "product_id": product.id, "key": "Form", "value": "Capsule"}

    missing_value = client.post(
        f"/api/products/{product.id}/specifications",
        json={"specifications": [{"key": "Only key"}]},
        headers=admin_headers,
    )
    assert missing_value.json()["message"] == "Key and value are required for all specifications"

    replaced = client.put(
        f"/api/products/{product.id}/specifications/bulk",
        json={"specifications": [{"key": "Shelf life", "value": "2 years"}]},
        headers=admin_headers,
    )
    assert replaced.status_code == 200
    specs = client.get(f"/api/products/{product.id}/specifications").json()["data"]
    assert [(s["key"], s["value"]) for s in specs] == [("Shelf life", "2 years")]


def test_admin_product_view_includes_inactive(client, admin_headers, make_product):
    product = make_product(is_active=False, cost_price=250)
    data = client.get(f"/api/products/{product.id}", headers=admin_headers).json()["data"]
    assert data["is_active"] is False
    assert data["cost_price"] == 250.0
    assert client.get(f"/api/products/{product.id}").status_code == 401


def test_stock_status_thresholds(make_product):
    assert make_product(stock=0).stock_status == "out_of_stock"
    assert make_product(stock=5, low_stock_threshold=5).stock_status == "low_stock"
    assert make_product(stock=6, low_stock_threshold=5).stock_status == "in_stock"
    assert isinstance(make_product(), Product)
