def test_root_redirects_home(client):
    resp = client.get("/", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/home"


def test_home_groups_products_by_category(client, make_product):
    make_product(name="Keyboard", category="electronics")
    make_product(name="Mouse", category="electronics")
    make_product(name="Mug", category="kitchen")

    body = client.get("/home").json()

    assert body["view"] == "home"
    assert body["login"] is False
    grouped = body["products_by_category"]
    assert sorted(grouped) == ["electronics", "kitchen"]
    assert [p["name"] for p in grouped["electronics"]] == ["Keyboard", "Mouse"]


def test_categories_are_distinct_and_sorted(client, make_product):
    make_product(category="toys")
    make_product(category="books")
    make_product(category="toys")

    assert client.get("/categories").json()["categories"] == ["books", "toys"]


def test_category_page(client, make_product):
    make_product(name="Novel", category="books")
    make_product(name="Ball", category="toys")

    body = client.get("/category/books").json()

    assert body["category"] == "books"
    assert [p["name"] for p in body["products"]] == ["Novel"]


def test_product_page_and_missing_product(client, make_product):
    product = make_product(name="Lamp")

    assert client.get(f"/product/{product.id}").json()["product"]["name"] == "Lamp"
    assert client.get("/product/9999").status_code == 404


def test_search_is_case_insensitive_over_name_description_category(client, make_product):
    make_product(name="Red Lamp", category="home")
    make_product(name="Chair", category="home", description="Fits any LAMP desk")
    make_product(name="Kettle", category="lampshades")
    make_product(name="Phone", category="electronics")

    body = client.get("/search", params={"q": "lamp"}).json()

    assert body["query"] == "lamp"
    assert sorted(p["name"] for p in body["products"]) == ["Chair", "Kettle", "Red Lamp"]
