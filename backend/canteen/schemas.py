from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    ADMIN = "Admin"
    MANAGER = "Manager"
    CASHIER = "Cashier"
    STAFF = "Staff"


class UserStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class OrderStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# 整数カラム（64bit符号付き）に格納できる上限
SQL_INT_MAX = 2**63 - 1


class CamelModel(BaseModel):
    """JSON側はcamelCase、Python側はsnake_case"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def validate_password_strength(password: str) -> str:
    """パスワード強度を検証する共通バリデーター"""
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not any(c.isdigit() for c in password):
        raise ValueError("Password must contain at least one digit")
    if not any(c.isalpha() for c in password):
        raise ValueError("Password must contain at least one letter")
    return password


# --- Auth ---

class SignupRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return validate_password_strength(v)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class ChangePasswordRequest(CamelModel):
    old_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v):
        return validate_password_strength(v)


# --- Users ---

class UserRead(CamelModel):
    id: str
    name: str
    email: str
    role: Role
    status: UserStatus
    last_login: Optional[datetime] = None


class UserCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str
    role: Role = Role.STAFF
    status: UserStatus = UserStatus.ACTIVE

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return validate_password_strength(v)


class UserUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=128)
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[Role] = None
    status: Optional[UserStatus] = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if v is None:
            return v
        return validate_password_strength(v)


class AuthResponse(CamelModel):
    token: str
    user: UserRead


class CurrentUserResponse(CamelModel):
    user: UserRead
    pages: List[str]


# --- Products ---

class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=128)
    category: str = Field(..., min_length=1, max_length=64)
    price: float = Field(..., ge=0)
    stock: StrictInt = Field(..., ge=0, le=SQL_INT_MAX)
    allergens: List[str] = Field(default_factory=list)
    supplier: str = ""
    expiry_date: str = ""


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=128)
    category: Optional[str] = Field(default=None, min_length=1, max_length=64)
    price: Optional[float] = Field(default=None, ge=0)
    stock: Optional[StrictInt] = Field(default=None, ge=0, le=SQL_INT_MAX)
    allergens: Optional[List[str]] = None
    supplier: Optional[str] = None
    expiry_date: Optional[str] = None


class ProductRead(CamelModel):
    id: str
    name: str
    category: str
    price: float
    stock: int
    allergens: List[str] = Field(default_factory=list)
    supplier: Optional[str] = ""
    expiry_date: Optional[str] = ""

    @field_validator("allergens", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or []


class StockChange(CamelModel):
    # 下限は設けない（大きすぎる出庫は在庫不足として InvalidState になる）
    change: StrictInt = Field(..., le=SQL_INT_MAX)


class ProductStatusRead(CamelModel):
    id: str
    stock: int
    status: Literal["Expired", "Low Stock", "In Stock"]


# --- Orders ---

class OrderItemRequest(CamelModel):
    product_id: str
    quantity: StrictInt = Field(..., le=SQL_INT_MAX)


class OrderCreate(CamelModel):
    customer_name: str = ""
    items: List[OrderItemRequest] = Field(default_factory=list)
    cashier: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING


class OrderUpdate(CamelModel):
    status: OrderStatus


class OrderItemRead(CamelModel):
    product_id: str
    name: str
    quantity: int
    price: float


class OrderRead(CamelModel):
    id: str
    customer_name: str
    items: List[OrderItemRead]
    total: float
    status: OrderStatus
    cashier: str
    timestamp: datetime


# --- Suppliers ---

class SupplierCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=128)
    contact_person: str = Field(..., min_length=1, max_length=128)
    phone: Optional[str] = Field(default=None, max_length=32)
    email: Optional[EmailStr] = None


class SupplierUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=128)
    contact_person: Optional[str] = Field(default=None, min_length=1, max_length=128)
    phone: Optional[str] = Field(default=None, max_length=32)
    email: Optional[EmailStr] = None


class SupplierRead(CamelModel):
    id: str
    name: str
    contact_person: str
    phone: Optional[str] = None
    email: Optional[str] = None


# --- Discounts ---

class DiscountCreate(CamelModel):
    code: str = Field(..., min_length=1, max_length=32)
    description: str = ""
    type: Literal["percentage", "fixed"]
    value: float = Field(..., ge=0)
    is_active: bool = True


class DiscountUpdate(CamelModel):
    code: Optional[str] = Field(default=None, min_length=1, max_length=32)
    description: Optional[str] = None
    type: Optional[Literal["percentage", "fixed"]] = None
    value: Optional[float] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class DiscountRead(CamelModel):
    id: str
    code: str
    description: Optional[str] = ""
    type: Literal["percentage", "fixed"]
    value: float
    is_active: bool


# --- Dashboard ---

class DashboardStats(CamelModel):
    total_revenue: float
    total_orders: int
    new_customers: int
    pending_orders: int


class SalesPoint(CamelModel):
    name: str
    sales: float


class TopProduct(CamelModel):
    name: str
    sales: int
