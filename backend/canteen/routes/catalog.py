from canteen.models.discount import Discount
from canteen.models.product import Product
from canteen.models.supplier import Supplier
from canteen.routes.crud import build_crud_router
from canteen.schemas import (
    DiscountCreate, DiscountRead, DiscountUpdate,
    ProductCreate, ProductRead, ProductUpdate,
    SupplierCreate, SupplierRead, SupplierUpdate,
)
from canteen.services.repository import Repository

products_repository = Repository(Product, "Product", order_by=lambda m: m.name)
suppliers_repository = Repository(Supplier, "Supplier", order_by=lambda m: m.name)
# 割引は登録のみ（注文合計の計算には使われない）
discounts_repository = Repository(Discount, "Discount", unique_field="code", order_by=lambda m: m.code)

products_router = build_crud_router("products", products_repository, ProductCreate, ProductUpdate, ProductRead)
suppliers_router = build_crud_router("suppliers", suppliers_repository, SupplierCreate, SupplierUpdate, SupplierRead)
discounts_router = build_crud_router("discounts", discounts_repository, DiscountCreate, DiscountUpdate, DiscountRead)
