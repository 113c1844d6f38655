import pytest

from conftest import create_order, create_product


def stats(client, headers):
    response = client.get("/api/dashboard/stats", headers=headers)
    assert response.status_code == 200
    return response.json()


def test_empty_dashboard(client, admin_headers):
    assert stats(client, admin_headers) == {
        "totalRevenue": 0.0, "totalOrders": 0, "newCustomers": 0, "pendingOrders": 0,
    }
    assert client.get("/api/dashboard/top-products", headers=admin_headers).json() == []


def test_stats_follow_order_statuses(client, admin_headers):
    wrap = create_product(client, admin_headers, price=4.0)
    line = [{"productId": wrap["id"], "quantity": 1}]
    done = create_order(client, admin_headers, line, customer="Ann", status="Completed")
    create_order(client, admin_headers, [{"productId": wrap["id"], "quantity": 3}], customer="Ann", status="Completed")
    pending = create_order(client, admin_headers, line, customer="Ben")
    create_order(client, admin_headers, line, customer="Cat", status="Cancelled")

    data = stats(client, admin_headers)
    assert data["totalRevenue"] == pytest.approx(16.0)
    assert data["totalOrders"] == 4
    assert data["pendingOrders"] == 1
    assert data["newCustomers"] == 3

    client.put(f"/api/orders/{pending['id']}", json={"status": "Completed"}, headers=admin_headers)
    client.put(f"/api/orders/{done['id']}", json={"status": "Cancelled"}, headers=admin_headers)

    data = stats(client, admin_headers)
    assert data["totalRevenue"] == pytest.approx(16.0 - 4.0 + 4.0)
    assert data["pendingOrders"] == 0


def test_revenue_is_sum_of_completed_totals(client, admin_headers):
    products = [create_product(client, admin_headers, name=f"P{i}", price=1.1 * (i + 1)) for i in range(3)]
    orders = []
    for i, product in enumerate(products):
        status = "Completed" if i != 1 else "Pending"
        orders.append(create_order(client, admin_headers, [{"productId": product["id"], "quantity": i + 2}], status=status))

    expected = sum(o["total"] for o in orders if o["status"] == "Completed")
    assert stats(client, admin_headers)["totalRevenue"] == pytest.approx(expected)


def test_top_products(client, admin_headers):
    names = ["Apple", "Bagel", "Cocoa", "Donut", "Eclair", "Fudge", "Gum"]
    products = {name: create_product(client, admin_headers, name=name, price=1.0) for name in names}

    quantities = {"Apple": 3, "Bagel": 9, "Cocoa": 1, "Donut": 7, "Eclair": 5, "Fudge": 2, "Gum": 4}
    for name, qty in quantities.items():
        create_order(client, admin_headers, [{"productId": products[name]["id"], "quantity": qty}], status="Completed")
    # 未完了の注文は集計しない
    create_order(client, admin_headers, [{"productId": products["Cocoa"]["id"], "quantity": 50}])
    # 同じ商品名は合算される
    create_order(client, admin_headers, [{"productId": products["Apple"]["id"], "quantity": 3}], status="Completed")

    top = client.get("/api/dashboard/top-products", headers=admin_headers).json()
    assert len(top) == 5
    assert top == [
        {"name": "Bagel", "sales": 9},
        {"name": "Donut", "sales": 7},
        {"name": "Apple", "sales": 6},
        {"name": "Eclair", "sales": 5},
        {"name": "Gum", "sales": 4},
    ]


def test_sales_series_is_fixed_week(client, admin_headers):
    series = client.get("/api/dashboard/sales", headers=admin_headers).json()
    assert [point["name"] for point in series] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert all(isinstance(point["sales"], float) for point in series)
