from sqlalchemy import Column, String
from canteen.database import Base
from canteen.models.base import new_id


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    contact_person = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)

    def __repr__(self):
        return f"<Supplier {self.name}>"
