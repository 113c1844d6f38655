from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from canteen.database import get_db
from canteen.errors import InvalidInput, InvalidState, NotFound
from canteen.schemas import ProductRead, ProductStatusRead, StockChange
from canteen.routes.catalog import products_repository
from canteen.services.inventory_service import InventoryService
from canteen.utils.jwt_auth import get_context, require_permission

router = APIRouter(prefix="/api/products", tags=["inventory"])


@router.patch("/{product_id}/stock", response_model=ProductRead)
def update_stock(
    request: Request,
    product_id: str,
    data: StockChange,
    current_user=Depends(require_permission("stock", "write")),
    db: Session = Depends(get_db),
):
    """在庫数を増減（正: 入庫、負: 出庫）"""
    audit = get_context(request).audit
    try:
        product = InventoryService.adjust_stock(db, product_id, data.change)
    except (InvalidInput, InvalidState, NotFound) as e:
        audit.log_request(
            request, "stock_adjust_rejected", user=current_user, success=False,
            status_code=e.status_code, details={"product_id": product_id, "change": data.change, "reason": e.detail},
        )
        raise

    audit.log_request(
        request, "stock_adjusted", user=current_user, status_code=200,
        details={"product_id": product_id, "change": data.change, "stock": product.stock},
    )
    return product


@router.get("/{product_id}/status", response_model=ProductStatusRead)
def get_stock_status(
    product_id: str,
    current_user=Depends(require_permission("stock", "read")),
    db: Session = Depends(get_db),
):
    """在庫ステータス（Expired / Low Stock / In Stock）"""
    product = products_repository.get(db, product_id)
    return {"id": product.id, "stock": product.stock, "status": InventoryService.stock_status(product)}
