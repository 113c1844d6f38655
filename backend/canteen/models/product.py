from sqlalchemy import Column, String, Float, Integer, JSON, CheckConstraint
from canteen.database import Base
from canteen.models.base import new_id


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    allergens = Column(JSON, default=list)
    supplier = Column(String, default="")  # 仕入先名（自由入力、Supplierとの参照整合性なし）
    expiry_date = Column(String, default="")  # YYYY-MM-DD

    def __repr__(self):
        return f"<Product {self.name}: stock={self.stock}>"
