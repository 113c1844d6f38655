from datetime import datetime
from sqlalchemy import Column, String, DateTime
from canteen.database import Base
from canteen.models.base import new_id


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)  # 外部には絶対に出さない
    role = Column(String, default="Staff")  # Admin / Manager / Cashier / Staff
    status = Column(String, default="Active")  # Active / Inactive
    last_login = Column(DateTime, default=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_active(self) -> bool:
        return self.status == "Active"

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
