from typing import List

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from canteen.database import get_db
from canteen.schemas import OrderCreate, OrderRead, OrderUpdate
from canteen.services.order_service import OrderService
from canteen.utils.jwt_auth import get_context, require_permission

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderRead, status_code=201)
def create_order(
    request: Request,
    data: OrderCreate,
    current_user=Depends(require_permission("orders", "write")),
    db: Session = Depends(get_db),
):
    """注文を作成（明細は作成時点の商品名・単価で確定）"""
    order = OrderService.create_order(
        db,
        customer_name=data.customer_name,
        items=data.items,
        cashier=data.cashier or current_user.name,
        status=data.status,
    )
    get_context(request).audit.log_request(
        request, "order_created", user=current_user, status_code=201,
        details={"order_id": order.id, "total": order.total, "items": len(order.items)},
    )
    return order


@router.get("", response_model=List[OrderRead])
def list_orders(current_user=Depends(require_permission("orders", "read")), db: Session = Depends(get_db)):
    """注文一覧（新しい順）"""
    return OrderService.list_orders(db)


@router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: str, current_user=Depends(require_permission("orders", "read")), db: Session = Depends(get_db)):
    return OrderService.get_order(db, order_id)


@router.put("/{order_id}", response_model=OrderRead)
def update_order(
    request: Request,
    order_id: str,
    data: OrderUpdate,
    current_user=Depends(require_permission("orders", "write")),
    db: Session = Depends(get_db),
):
    """ステータスのみ更新"""
    order = OrderService.get_order(db, order_id)
    old_status = order.status
    order = OrderService.update_order_status(db, order_id, data.status)
    get_context(request).audit.log_request(
        request, "order_status_changed", user=current_user, status_code=200,
        details={"order_id": order_id, "old": old_status, "new": order.status},
    )
    return order


@router.delete("/{order_id}", status_code=204)
def delete_order(
    request: Request,
    order_id: str,
    current_user=Depends(require_permission("orders", "write")),
    db: Session = Depends(get_db),
):
    order = OrderService.get_order(db, order_id)
    details = {"order_id": order_id, "status": order.status, "total": order.total}
    OrderService.delete_order(db, order_id)
    get_context(request).audit.log_request(
        request, "order_deleted", user=current_user, status_code=204, details=details,
    )
    return Response(status_code=204)
