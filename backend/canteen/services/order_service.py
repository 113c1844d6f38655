import logging
from typing import Iterable, List

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from canteen.errors import InvalidInput, NotFound
from canteen.models.order import Order, OrderItem
from canteen.models.product import Product
from canteen.schemas import OrderItemRequest, OrderStatus

logger = logging.getLogger(__name__)

TOP_PRODUCTS_LIMIT = 5

# 売上推移グラフ用の固定データ（実際の注文からは算出していない）
PLACEHOLDER_WEEKLY_SALES = [
    {"name": "Mon", "sales": 400.50}, {"name": "Tue", "sales": 300.25},
    {"name": "Wed", "sales": 500.00}, {"name": "Thu", "sales": 280.75},
    {"name": "Fri", "sales": 450.10}, {"name": "Sat", "sales": 600.90},
    {"name": "Sun", "sales": 550.60},
]


class OrderService:
    """注文の作成・更新とダッシュボード集計"""

    @staticmethod
    def _status_value(status) -> str:
        return status.value if isinstance(status, OrderStatus) else OrderStatus(status).value

    @staticmethod
    def create_order(
        db: Session,
        customer_name: str,
        items: Iterable[OrderItemRequest],
        cashier: str,
        status=OrderStatus.PENDING,
    ) -> Order:
        """
        注文を明細ごと1トランザクションで作成する。

        各明細には作成時点の商品名・単価をコピーし、合計は
        Σ(単価 × 数量) で計算する。在庫は減らさない（在庫調整は
        InventoryService.adjust_stock を別途呼ぶ）。
        """
        items = list(items)
        if not customer_name or not customer_name.strip():
            raise InvalidInput("Customer name is required")
        if not items:
            raise InvalidInput("Order must contain at least one item")
        if not cashier or not cashier.strip():
            raise InvalidInput("Cashier is required")

        order = Order(
            customer_name=customer_name.strip(),
            cashier=cashier,
            status=OrderService._status_value(status),
        )
        total = 0.0
        for position, item in enumerate(items):
            if isinstance(item.quantity, bool) or item.quantity < 1:
                raise InvalidInput("Item quantity must be at least 1")
            product = db.get(Product, item.product_id)
            if product is None:
                raise NotFound(f"Product {item.product_id} not found")

            order.items.append(OrderItem(
                position=position,
                product_id=product.id,
                name=product.name,
                quantity=item.quantity,
                price=product.price,
            ))
            total += product.price * item.quantity

        order.total = total
        db.add(order)
        db.commit()
        db.refresh(order)
        logger.info("Order %s created for %s (%d items, total=%.2f)",
                    order.id, order.customer_name, len(order.items), order.total)
        return order

    @staticmethod
    def list_orders(db: Session) -> List[Order]:
        return (
            db.query(Order)
            .options(selectinload(Order.items))
            .order_by(Order.timestamp.desc())
            .all()
        )

    @staticmethod
    def get_order(db: Session, order_id: str) -> Order:
        order = db.get(Order, order_id)
        if order is None:
            raise NotFound("Order not found")
        return order

    @staticmethod
    def update_order_status(db: Session, order_id: str, new_status) -> Order:
        """ステータスのみ変更可能。遷移の制約はない"""
        order = OrderService.get_order(db, order_id)
        order.status = OrderService._status_value(new_status)
        db.commit()
        db.refresh(order)
        return order

    @staticmethod
    def delete_order(db: Session, order_id: str) -> Order:
        order = OrderService.get_order(db, order_id)
        db.delete(order)
        db.commit()
        return order

    # --- ダッシュボード ---

    @staticmethod
    def dashboard_stats(db: Session) -> dict:
        total_revenue = (
            db.query(func.coalesce(func.sum(Order.total), 0.0))
            .filter(Order.status == OrderStatus.COMPLETED.value)
            .scalar()
        )
        total_orders = db.query(func.count(Order.id)).scalar()
        pending_orders = (
            db.query(func.count(Order.id))
            .filter(Order.status == OrderStatus.PENDING.value)
            .scalar()
        )
        # 顧客名のユニーク数を「新規顧客数」とみなす
        new_customers = db.query(func.count(func.distinct(Order.customer_name))).scalar()

        return {
            "total_revenue": float(total_revenue or 0.0),
            "total_orders": total_orders or 0,
            "new_customers": new_customers or 0,
            "pending_orders": pending_orders or 0,
        }

    @staticmethod
    def top_products(db: Session, limit: int = TOP_PRODUCTS_LIMIT) -> List[dict]:
        """完了済み注文の明細を商品名ごとに数量合計し、多い順に返す"""
        quantity = func.sum(OrderItem.quantity).label("sales")
        rows = (
            db.query(OrderItem.name, quantity)
            .join(Order, OrderItem.order_id == Order.id)
            .filter(Order.status == OrderStatus.COMPLETED.value)
            .group_by(OrderItem.name)
            .order_by(quantity.desc(), OrderItem.name)
            .limit(limit)
            .all()
        )
        return [{"name": name, "sales": int(sales)} for name, sales in rows]

    @staticmethod
    def weekly_sales() -> List[dict]:
        return [dict(point) for point in PLACEHOLDER_WEEKLY_SALES]
