from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from canteen.database import get_db
from canteen.schemas import DashboardStats, SalesPoint, TopProduct
from canteen.services.order_service import OrderService
from canteen.utils.jwt_auth import require_permission

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
def get_stats(current_user=Depends(require_permission("dashboard", "read")), db: Session = Depends(get_db)):
    """売上合計・注文数・顧客数・保留中注文数"""
    return OrderService.dashboard_stats(db)


@router.get("/sales", response_model=List[SalesPoint])
def get_sales(current_user=Depends(require_permission("dashboard", "read"))):
    """曜日別売上（固定データ）"""
    return OrderService.weekly_sales()


@router.get("/top-products", response_model=List[TopProduct])
def get_top_products(current_user=Depends(require_permission("dashboard", "read")), db: Session = Depends(get_db)):
    """完了済み注文の売れ筋上位5商品"""
    return OrderService.top_products(db)
