"""
ロール階層と画面・ルート単位の権限テーブル

ROLES_HIERARCHY[role] はそのロールが代行できるロールの集合。
API側の既定は「認証済みなら全ロール許可」で、ROUTE_PERMISSIONS は
Settings.enforce_role_permissions が有効な場合のみ適用される。
"""

from typing import Dict, List, Union

from canteen.schemas import Role

ROLES_HIERARCHY: Dict[Role, List[Role]] = {
    Role.ADMIN: [Role.ADMIN, Role.MANAGER, Role.CASHIER, Role.STAFF],
    Role.MANAGER: [Role.MANAGER, Role.CASHIER, Role.STAFF],
    Role.CASHIER: [Role.CASHIER],
    Role.STAFF: [Role.STAFF],
}

NAVIGATION_ITEMS = [
    {"name": "Dashboard", "page": "Dashboard", "roles": [Role.ADMIN, Role.MANAGER]},
    {"name": "New Order", "page": "NewOrder", "roles": [Role.ADMIN, Role.MANAGER, Role.CASHIER]},
    {"name": "Orders", "page": "Orders", "roles": [Role.ADMIN, Role.MANAGER, Role.CASHIER]},
    {"name": "Products", "page": "Products", "roles": [Role.ADMIN, Role.MANAGER]},
    {"name": "Inventory", "page": "Inventory", "roles": [Role.ADMIN, Role.MANAGER]},
    {"name": "Suppliers", "page": "Suppliers", "roles": [Role.ADMIN, Role.MANAGER]},
    {"name": "Discounts", "page": "Discounts", "roles": [Role.ADMIN, Role.MANAGER]},
    {"name": "Users", "page": "Users", "roles": [Role.ADMIN]},
    {"name": "Settings", "page": "Settings", "roles": [Role.ADMIN, Role.MANAGER, Role.CASHIER, Role.STAFF]},
]

# collection -> {"read": 最低ロール, "write": 最低ロール}
ROUTE_PERMISSIONS: Dict[str, Dict[str, Role]] = {
    "users": {"read": Role.ADMIN, "write": Role.ADMIN},
    "products": {"read": Role.CASHIER, "write": Role.MANAGER},
    "stock": {"read": Role.MANAGER, "write": Role.MANAGER},
    "orders": {"read": Role.CASHIER, "write": Role.CASHIER},
    "suppliers": {"read": Role.MANAGER, "write": Role.MANAGER},
    "discounts": {"read": Role.MANAGER, "write": Role.MANAGER},
    "dashboard": {"read": Role.MANAGER, "write": Role.MANAGER},
}


def _as_role(role: Union[Role, str]) -> Role:
    return role if isinstance(role, Role) else Role(role)


def has_authority(role: Union[Role, str], required: Union[Role, str]) -> bool:
    """role が required の権限を包含しているか"""
    try:
        return _as_role(required) in ROLES_HIERARCHY[_as_role(role)]
    except ValueError:
        return False


def allowed_pages(role: Union[Role, str]) -> List[str]:
    try:
        role = _as_role(role)
    except ValueError:
        return []
    return [item["page"] for item in NAVIGATION_ITEMS if role in item["roles"]]


def can_open(role: Union[Role, str], page: str) -> bool:
    return page in allowed_pages(role)


def can_perform(role: Union[Role, str], collection: str, action: str) -> bool:
    required = ROUTE_PERMISSIONS.get(collection, {}).get(action)
    if required is None:
        return True
    return has_authority(role, required)
