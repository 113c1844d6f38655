"""
JWT認証ユーティリティ
Bearer Tokenによる認証・認可の依存関係を提供する
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from canteen.database import get_db
from canteen.errors import Forbidden, Unauthenticated
from canteen.models.user import User
from canteen.services.auth_service import Identity
from canteen.services.authorization import can_perform
from canteen.schemas import Role

# ヘッダー欠落時も 403 ではなく 401 を返すため auto_error=False
security = HTTPBearer(auto_error=False)


def get_context(request: Request):
    return request.app.state.context


async def get_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Identity:
    """Authorization: Bearer <token> を検証して (userId, role) を返す"""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthenticated("Unauthorized")
    return get_context(request).issuer.verify(credentials.credentials)


def get_current_user(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
) -> User:
    """
    トークンのユーザーを返す。
    削除済み・非アクティブのユーザーは 401。
    """
    user = db.get(User, identity.user_id)
    if user is None or not user.is_active:
        raise Unauthenticated("Unauthorized")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """管理者ロールを要求する依存関係"""
    if current_user.role != Role.ADMIN.value:
        raise Forbidden("Admin role required")
    return current_user


def require_permission(collection: str, action: str):
    """
    ルート単位のロールチェック。
    Settings.enforce_role_permissions が無効なら認証のみ行う。
    """
    def dependency(request: Request, current_user: User = Depends(get_current_user)) -> User:
        settings = get_context(request).settings
        if settings.enforce_role_permissions and not can_perform(current_user.role, collection, action):
            raise Forbidden(f"Role {current_user.role} may not {action} {collection}")
        return current_user

    return dependency
