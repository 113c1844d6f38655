import calendar
import re
from datetime import date
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from canteen.errors import CanteenError, InvalidInput, InvalidState, NotFound
from canteen.models.product import Product
from canteen.schemas import SQL_INT_MAX

LOW_STOCK_THRESHOLD = 20

MOVEMENT_SIGNS = {"Inflow": 1, "Outflow": -1}

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")


def _parse_date(value: Optional[str]) -> Optional[date]:
    """先頭の YYYY-MM-DD を日付として読む。読めなければ None（期限なし扱い）"""
    if not value or not _ISO_DATE.match(value):
        return None
    year, month, day = int(value[:4]), int(value[5:7]), int(value[8:10])
    if year < 1 or not 1 <= month <= 12 or not 1 <= day <= calendar.monthrange(year, month)[1]:
        return None
    return date(year, month, day)


class InventoryService:
    """在庫調整サービス（在庫数が負にならないことを保証する唯一の場所）"""

    @staticmethod
    def adjust_stock(db: Session, product_id: str, delta: int) -> Product:
        """
        在庫に符号付きの増減を適用する。

        正の値は入庫、負の値は出庫。stock + delta < 0 になる場合は
        何も変更せずに InvalidState を返す。更新は条件付きUPDATE1文で行うため、
        同一商品への同時出庫でも在庫がマイナスになることはない。
        整数カラムの上限を超える入庫は InvalidInput。
        """
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise InvalidInput("Stock change must be an integer")
        if delta > SQL_INT_MAX:
            raise InvalidInput("Stock change is too large")

        query = update(Product).where(Product.id == product_id)
        if delta < 0:
            # -delta が整数カラムに収まらなければどの在庫でも不足
            if -delta > SQL_INT_MAX:
                raise InventoryService._rejection(db, product_id, "Stock cannot be negative")
            query = query.where(Product.stock >= -delta)
        elif delta > 0:
            query = query.where(Product.stock <= SQL_INT_MAX - delta)

        result = db.execute(
            query
            .values(stock=Product.stock + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            db.rollback()
            if delta > 0:
                raise InventoryService._rejection(db, product_id, "Stock would exceed the maximum", InvalidInput)
            raise InventoryService._rejection(db, product_id, "Stock cannot be negative")

        db.commit()
        product = db.get(Product, product_id)
        db.refresh(product)
        return product

    @staticmethod
    def _rejection(db: Session, product_id: str, detail: str, error=InvalidState) -> CanteenError:
        if db.get(Product, product_id) is None:
            return NotFound("Product not found")
        return error(detail)

    @staticmethod
    def record_movement(db: Session, product_id: str, kind: str, quantity: int) -> Product:
        """Inflow / Outflow と数量から在庫調整を行う"""
        if kind not in MOVEMENT_SIGNS:
            raise InvalidInput("Movement type must be Inflow or Outflow")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidInput("Quantity must be a positive integer")
        return InventoryService.adjust_stock(db, product_id, MOVEMENT_SIGNS[kind] * quantity)

    @staticmethod
    def stock_status(product: Product, today: Optional[date] = None) -> str:
        """在庫ステータス（期限切れ > 在庫少 > 在庫あり）"""
        today = today or date.today()
        expiry = _parse_date(product.expiry_date)
        if expiry is not None and expiry < today:
            return "Expired"
        if product.stock <= LOW_STOCK_THRESHOLD:
            return "Low Stock"
        return "In Stock"
