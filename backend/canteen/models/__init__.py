from canteen.models.audit_log import AuditLog
from canteen.models.discount import Discount
from canteen.models.order import Order, OrderItem
from canteen.models.product import Product
from canteen.models.supplier import Supplier
from canteen.models.user import User

__all__ = ["AuditLog", "Discount", "Order", "OrderItem", "Product", "Supplier", "User"]
