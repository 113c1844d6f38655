"""
Canteen POS クライアント

管理画面（SPA）のサービス層に相当する型付きHTTPクライアント。
一覧画面ごとの状態は ListView（Loading / Ready / Error）で管理する。
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar, Union

import httpx
from pydantic import BaseModel

from canteen.schemas import (
    AuthResponse, CurrentUserResponse, DashboardStats, DiscountRead, OrderRead, ProductRead,
    Role, SalesPoint, SupplierRead, TopProduct, UserRead,
)
from canteen.services.authorization import allowed_pages

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

TOKEN_HEADER = "Authorization"


class ApiError(Exception):
    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{status_code}: {detail}")


class ClientValidationError(ValueError):
    """送信前にクライアント側で弾いた入力"""


def navigation_for(role: Union[Role, str]) -> List[str]:
    return allowed_pages(role)


class CanteenClient:
    """/api 以下のエンドポイントを呼ぶクライアント"""

    COLLECTIONS: Dict[str, Type[BaseModel]] = {
        "users": UserRead,
        "products": ProductRead,
        "orders": OrderRead,
        "suppliers": SupplierRead,
        "discounts": DiscountRead,
    }

    def __init__(self, base_url: str = "http://localhost:8000", http: Optional[httpx.Client] = None,
                 timeout: float = 10.0):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.token: Optional[str] = None
        self.user: Optional[UserRead] = None

    def close(self):
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # --- 共通 ---

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers[TOKEN_HEADER] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, json=None):
        response = self.http.request(method, f"/api{path}", json=json, headers=self._headers())
        if response.status_code >= 400:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            raise ApiError(response.status_code, str(detail))
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # --- 認証 ---

    def _remember(self, data: dict) -> UserRead:
        auth = AuthResponse.model_validate(data)
        self.token = auth.token
        self.user = auth.user
        return auth.user

    def signup(self, name: str, email: str, password: str) -> UserRead:
        return self._remember(self._request("POST", "/auth/signup", {"name": name, "email": email, "password": password}))

    def login(self, email: str, password: str) -> UserRead:
        return self._remember(self._request("POST", "/auth/login", {"email": email, "password": password}))

    def logout(self):
        self.token = None
        self.user = None

    def me(self) -> CurrentUserResponse:
        return CurrentUserResponse.model_validate(self._request("GET", "/auth/me"))

    def navigation(self) -> List[str]:
        if self.user is None:
            return []
        return navigation_for(self.user.role)

    # --- CRUD ---

    def list(self, collection: str) -> List[BaseModel]:
        schema = self.COLLECTIONS[collection]
        return [schema.model_validate(item) for item in self._request("GET", f"/{collection}")]

    def add(self, collection: str, payload: dict) -> BaseModel:
        return self.COLLECTIONS[collection].model_validate(self._request("POST", f"/{collection}", payload))

    def update(self, collection: str, item_id: str, payload: dict) -> BaseModel:
        return self.COLLECTIONS[collection].model_validate(self._request("PUT", f"/{collection}/{item_id}", payload))

    def delete(self, collection: str, item_id: str):
        self._request("DELETE", f"/{collection}/{item_id}")

    def update_product_stock(self, product_id: str, change: int) -> ProductRead:
        return ProductRead.model_validate(self._request("PATCH", f"/products/{product_id}/stock", {"change": change}))

    # --- ダッシュボード ---

    def dashboard_stats(self) -> DashboardStats:
        return DashboardStats.model_validate(self._request("GET", "/dashboard/stats"))

    def dashboard_sales(self) -> List[SalesPoint]:
        return [SalesPoint.model_validate(p) for p in self._request("GET", "/dashboard/sales")]

    def top_products(self) -> List[TopProduct]:
        return [TopProduct.model_validate(p) for p in self._request("GET", "/dashboard/top-products")]

    # --- 画面操作 ---

    def record_stock_movement(self, product: ProductRead, kind: str, quantity: int) -> ProductRead:
        """在庫の入出庫。出庫は手元の在庫数で事前チェックする"""
        if kind not in ("Inflow", "Outflow"):
            raise ClientValidationError("Movement type must be Inflow or Outflow")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ClientValidationError("Please fill all fields with valid values.")
        if kind == "Outflow" and product.stock < quantity:
            raise ClientValidationError("Cannot record outflow. Not enough stock.")
        change = quantity if kind == "Inflow" else -quantity
        return self.update_product_stock(product.id, change)

    def place_order(self, customer_name: str, cart: Iterable[dict], cashier: Optional[str] = None,
                    status: str = "Completed") -> OrderRead:
        """cart: [{"productId": ..., "quantity": ...}]"""
        cart = list(cart)
        if not customer_name.strip():
            raise ClientValidationError("Please enter a customer name.")
        if not cart:
            raise ClientValidationError("The order is empty.")
        if cashier is None:
            if self.user is None:
                raise ClientValidationError("You must be logged in to place an order.")
            cashier = self.user.name
        payload = {"customerName": customer_name, "items": cart, "cashier": cashier, "status": status}
        return OrderRead.model_validate(self._request("POST", "/orders", payload))


class ViewState(str, Enum):
    LOADING = "Loading"
    READY = "Ready"
    ERROR = "Error"


@dataclass
class ListView(Generic[T]):
    """
    一覧画面の状態機械: Loading -> Ready(items) | Error(message)

    削除は「削除してから再取得」。失敗してもエラーを記録した上で
    サーバーの状態を取り直す。
    """
    fetch: Callable[[], List[T]]
    remove: Optional[Callable[[str], None]] = None
    sort_key: Optional[Callable[[T], object]] = None
    state: ViewState = ViewState.LOADING
    items: List[T] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def for_collection(cls, client: CanteenClient, collection: str, **kwargs) -> "ListView":
        return cls(
            fetch=lambda: client.list(collection),
            remove=lambda item_id: client.delete(collection, item_id),
            **kwargs,
        )

    def refresh(self) -> "ListView[T]":
        self.state = ViewState.LOADING
        try:
            items = self.fetch()
        except (ApiError, httpx.HTTPError) as e:
            logger.warning("List fetch failed: %s", e)
            self.state = ViewState.ERROR
            self.error = str(e)
            return self
        self.items = sorted(items, key=self.sort_key) if self.sort_key else list(items)
        self.state = ViewState.READY
        self.error = None
        return self

    def delete(self, item_id: str) -> bool:
        if self.remove is None:
            raise ClientValidationError("This list does not support deletion")
        try:
            self.remove(item_id)
        except (ApiError, httpx.HTTPError) as e:
            logger.warning("Delete %s failed: %s", item_id, e)
            self.refresh()
            self.state = ViewState.ERROR
            self.error = str(e)
            return False
        self.refresh()
        return self.state == ViewState.READY
