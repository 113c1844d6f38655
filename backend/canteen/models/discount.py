from sqlalchemy import Column, String, Float, Boolean
from canteen.database import Base
from canteen.models.base import new_id


class Discount(Base):
    __tablename__ = "discounts"

    id = Column(String(32), primary_key=True, default=new_id)
    code = Column(String, unique=True, index=True, nullable=False)
    description = Column(String, default="")
    type = Column(String, nullable=False)  # percentage / fixed
    value = Column(Float, nullable=False)
    is_active = Column(Boolean, default=True)

    def __repr__(self):
        return f"<Discount {self.code}: {self.type} {self.value}>"
