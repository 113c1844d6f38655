from datetime import datetime
from sqlalchemy import Column, String, Float, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from canteen.database import Base
from canteen.models.base import new_id


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(32), primary_key=True, default=new_id)
    customer_name = Column(String, nullable=False, index=True)
    total = Column(Float, nullable=False)
    status = Column(String, default="Pending", index=True)  # Pending / Completed / Cancelled
    cashier = Column(String, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow, index=True)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )

    def __repr__(self):
        return f"<Order {self.id}: {self.customer_name} {self.status} total={self.total}>"


class OrderItem(Base):
    """注文時点の商品名・単価のスナップショット"""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String(32), ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    position = Column(Integer, default=0)
    # 商品への弱い参照（削除されても注文側は残す）
    product_id = Column(String(32), nullable=False)
    name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")
