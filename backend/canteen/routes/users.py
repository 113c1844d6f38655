from typing import List

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from canteen.database import get_db
from canteen.errors import InvalidState
from canteen.models.user import User
from canteen.schemas import UserCreate, UserRead, UserUpdate
from canteen.services.auth_service import CredentialStore, hash_password
from canteen.services.repository import Repository
from canteen.utils.jwt_auth import get_context, require_permission

router = APIRouter(prefix="/api/users", tags=["users"])

users_repository = Repository(User, "User", unique_field="email", order_by=lambda m: m.name)

can_read = require_permission("users", "read")
can_write = require_permission("users", "write")


@router.post("", response_model=UserRead, status_code=201)
def create_user(request: Request, data: UserCreate, current_user=Depends(can_write), db: Session = Depends(get_db)):
    """ユーザー作成"""
    user = CredentialStore.create_user(
        db, data.name, data.email, data.password, role=data.role.value, status=data.status.value,
    )
    get_context(request).audit.log_request(
        request, "user_created", user=current_user, status_code=201,
        details={"created_user": user.email, "role": user.role},
    )
    return user


@router.get("", response_model=List[UserRead])
def list_users(current_user=Depends(can_read), db: Session = Depends(get_db)):
    """ユーザー一覧"""
    return users_repository.list(db)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, current_user=Depends(can_read), db: Session = Depends(get_db)):
    return users_repository.get(db, user_id)


@router.put("/{user_id}", response_model=UserRead)
def update_user(request: Request, user_id: str, data: UserUpdate, current_user=Depends(can_write), db: Session = Depends(get_db)):
    """ユーザー情報を更新（パスワード指定時は再ハッシュ）"""
    values = data.model_dump(exclude_unset=True, exclude_none=True)
    password = values.pop("password", None)
    if password:
        values["password_hash"] = hash_password(password)
    for key in ("role", "status"):
        if values.get(key) is not None:
            values[key] = values[key].value

    user = users_repository.update_from_values(db, user_id, values)
    changed = sorted(k for k in values if k != "password_hash")
    if password:
        changed.append("password")
    get_context(request).audit.log_request(
        request, "user_updated", user=current_user, status_code=200,
        details={"target_user": user.email, "changed": changed},
    )
    return user


@router.delete("/{user_id}", status_code=204)
def delete_user(request: Request, user_id: str, current_user=Depends(can_write), db: Session = Depends(get_db)):
    """ユーザーを削除"""
    user = users_repository.get(db, user_id)
    if user.id == current_user.id:
        raise InvalidState("You cannot delete your own account")
    details = {"deleted_user": user.email, "deleted_user_role": user.role}
    users_repository.delete(db, user_id)
    get_context(request).audit.log_request(
        request, "user_deleted", user=current_user, status_code=204, details=details,
    )
    return Response(status_code=204)
