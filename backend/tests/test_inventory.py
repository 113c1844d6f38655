from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from canteen.errors import InvalidInput, InvalidState, NotFound
from canteen.models.product import Product
from canteen.schemas import SQL_INT_MAX
from canteen.services.inventory_service import InventoryService

from conftest import create_product


@pytest.fixture
def product(db):
    item = Product(name="Orange Juice", category="Drinks", price=2.0, stock=10, allergens=[], supplier="", expiry_date="")
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


class TestAdjustStock:
    @pytest.mark.parametrize("delta", [-11, -10, -3, 0, 1, 25])
    def test_succeeds_iff_result_non_negative(self, db, product, delta):
        start = product.stock
        if start + delta >= 0:
            updated = InventoryService.adjust_stock(db, product.id, delta)
            assert updated.stock == start + delta
        else:
            with pytest.raises(InvalidState):
                InventoryService.adjust_stock(db, product.id, delta)
            db.expire_all()
            assert db.get(Product, product.id).stock == start

    def test_sequence_of_adjustments(self, db, product):
        for delta in (5, -7, -8, 3):
            InventoryService.adjust_stock(db, product.id, delta)
        assert db.get(Product, product.id).stock == 3

    def test_unknown_product(self, db):
        with pytest.raises(NotFound):
            InventoryService.adjust_stock(db, "missing", 1)

    def test_outflow_beyond_integer_range(self, db, product):
        with pytest.raises(InvalidState):
            InventoryService.adjust_stock(db, product.id, -2**70)
        with pytest.raises(NotFound):
            InventoryService.adjust_stock(db, "missing", -2**70)
        assert db.get(Product, product.id).stock == 10

    @pytest.mark.parametrize("delta", [2**70, SQL_INT_MAX])
    def test_inflow_beyond_integer_range(self, db, product, delta):
        with pytest.raises(InvalidInput):
            InventoryService.adjust_stock(db, product.id, delta)
        db.expire_all()
        assert db.get(Product, product.id).stock == 10

    def test_concurrent_outflows_never_oversell(self, context, db, product):
        def take_one(_):
            session = context.database.session()
            try:
                InventoryService.adjust_stock(session, product.id, -1)
                return True
            except InvalidState:
                return False
            finally:
                session.close()

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(take_one, range(30)))

        assert results.count(True) == 10
        assert results.count(False) == 20
        db.expire_all()
        assert db.get(Product, product.id).stock == 0

    @pytest.mark.parametrize("delta", [1.5, "3", True, None])
    def test_non_integer_delta(self, db, product, delta):
        with pytest.raises(InvalidInput):
            InventoryService.adjust_stock(db, product.id, delta)

    def test_record_movement(self, db, product):
        assert InventoryService.record_movement(db, product.id, "Inflow", 5).stock == 15
        assert InventoryService.record_movement(db, product.id, "Outflow", 15).stock == 0
        with pytest.raises(InvalidState):
            InventoryService.record_movement(db, product.id, "Outflow", 1)

    @pytest.mark.parametrize("kind,quantity", [("Inflow", 0), ("Outflow", -2), ("Sideways", 1)])
    def test_record_movement_rejects_bad_input(self, db, product, kind, quantity):
        with pytest.raises(InvalidInput):
            InventoryService.record_movement(db, product.id, kind, quantity)


class TestStockStatus:
    def _product(self, stock, expiry):
        return Product(name="x", category="y", price=1.0, stock=stock, expiry_date=expiry)

    def test_expired_wins(self):
        status = InventoryService.stock_status(self._product(100, "2024-01-01"), today=date(2024, 6, 1))
        assert status == "Expired"

    def test_low_stock_threshold(self):
        assert InventoryService.stock_status(self._product(20, ""), today=date(2024, 6, 1)) == "Low Stock"
        assert InventoryService.stock_status(self._product(21, ""), today=date(2024, 6, 1)) == "In Stock"

    @pytest.mark.parametrize("expiry", ["", "soon", "2024-13-40", "0000-01-01"])
    def test_unreadable_expiry_is_ignored(self, expiry):
        assert InventoryService.stock_status(self._product(50, expiry), today=date(2024, 6, 1)) == "In Stock"


class TestStockEndpoint:
    def test_patch_stock(self, client, admin_headers):
        product = create_product(client, admin_headers, stock=50)
        response = client.patch(f"/api/products/{product['id']}/stock", json={"change": -10}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["stock"] == 40

    def test_overdraw_fails_and_leaves_stock(self, client, admin_headers):
        product = create_product(client, admin_headers, stock=50)
        response = client.patch(f"/api/products/{product['id']}/stock", json={"change": -51}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Stock cannot be negative"

        products = client.get("/api/products", headers=admin_headers).json()
        assert products[0]["stock"] == 50

    def test_unknown_product_404(self, client, admin_headers):
        response = client.patch("/api/products/nope/stock", json={"change": 1}, headers=admin_headers)
        assert response.status_code == 404

    @pytest.mark.parametrize("body", [{"change": 1.5}, {"change": "2"}, {"change": True}, {}])
    def test_change_must_be_integer(self, client, admin_headers, body):
        product = create_product(client, admin_headers)
        response = client.patch(f"/api/products/{product['id']}/stock", json=body, headers=admin_headers)
        assert response.status_code == 422

    @pytest.mark.parametrize("change", [2**63, 2**70])
    def test_oversized_change_rejected(self, client, admin_headers, change):
        product = create_product(client, admin_headers, stock=5)
        response = client.patch(f"/api/products/{product['id']}/stock", json={"change": change}, headers=admin_headers)
        assert response.status_code == 422

    def test_huge_outflow_is_insufficient_stock(self, client, admin_headers):
        product = create_product(client, admin_headers, stock=5)
        response = client.patch(f"/api/products/{product['id']}/stock", json={"change": -2**70}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Stock cannot be negative"
        assert client.get(f"/api/products/{product['id']}", headers=admin_headers).json()["stock"] == 5

    def test_adjustments_are_audited(self, client, admin_headers):
        product = create_product(client, admin_headers, stock=1)
        client.patch(f"/api/products/{product['id']}/stock", json={"change": 2}, headers=admin_headers)
        client.patch(f"/api/products/{product['id']}/stock", json={"change": -9}, headers=admin_headers)

        logs = client.get("/api/admin/audit-logs", headers=admin_headers).json()["logs"]
        events = [log["eventType"] for log in logs]
        assert "stock_adjusted" in events
        assert "stock_adjust_rejected" in events

    def test_status_endpoint(self, client, admin_headers):
        product = create_product(client, admin_headers, stock=5, expiryDate="2099-01-01")
        response = client.get(f"/api/products/{product['id']}/status", headers=admin_headers)
        assert response.json() == {"id": product["id"], "stock": 5, "status": "Low Stock"}
