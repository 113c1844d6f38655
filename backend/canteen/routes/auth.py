from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from canteen.database import get_db
from canteen.errors import CanteenError
from canteen.schemas import (
    AuthResponse, ChangePasswordRequest, CurrentUserResponse, LoginRequest, SignupRequest,
)
from canteen.services.auth_service import CredentialStore
from canteen.services.authorization import allowed_pages
from canteen.utils.audit_logger import client_info
from canteen.utils.jwt_auth import get_context, get_current_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=201)
def signup(request: Request, data: SignupRequest, db: Session = Depends(get_db)):
    """新規登録（最初のユーザーは Admin、以降は Cashier）"""
    context = get_context(request)
    user = CredentialStore.signup(db, data.name, data.email, data.password)
    context.audit.log_request(request, "signup", user=user, status_code=201, details={"role": user.role})
    return {"token": context.issuer.issue(user), "user": user}


@router.post("/login", response_model=AuthResponse)
def login(request: Request, data: LoginRequest, db: Session = Depends(get_db)):
    """ユーザーログイン"""
    context = get_context(request)
    ip_address, _ = client_info(request)

    # ブルートフォース対策：IP単位でレート制限
    if not context.login_limiter.is_allowed(ip_address):
        remaining = context.login_limiter.get_remaining_time(ip_address)
        context.audit.log_request(
            request, "login_rate_limit_exceeded", username=data.email, success=False, status_code=429,
        )
        raise HTTPException(
            status_code=429,
            detail=f"Too many login attempts. Try again in {remaining} seconds",
        )

    try:
        user, token = CredentialStore.login(db, context.issuer, data.email, data.password)
    except CanteenError as e:
        context.audit.log_request(
            request, "login_failure", username=data.email, success=False,
            status_code=e.status_code, details={"reason": e.detail},
        )
        raise

    context.audit.log_request(request, "login_success", user=user, status_code=200)
    return {"token": token, "user": user}


@router.post("/logout")
def logout():
    """ログアウト（トークンはクライアント側で破棄する）"""
    return {"success": True, "message": "Logged out"}


@router.get("/me", response_model=CurrentUserResponse)
def me(current_user=Depends(get_current_user)):
    """ログイン中のユーザーと表示可能な画面"""
    return {"user": current_user, "pages": allowed_pages(current_user.role)}


@router.post("/change-password")
def change_password(data: ChangePasswordRequest, current_user=Depends(get_current_user), db: Session = Depends(get_db)):
    """パスワード変更"""
    CredentialStore.change_password(db, current_user, data.old_password, data.new_password)
    return {"success": True, "message": "Password changed"}
