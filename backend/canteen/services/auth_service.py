from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from canteen.errors import Conflict, Forbidden, Unauthenticated
from canteen.models.user import User
from canteen.schemas import Role

# パスワードハッシング設定
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

INVALID_CREDENTIALS = "Invalid credentials"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: Role


class SessionIssuer:
    """Bearerトークンの発行・検証"""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_hours: int = 24):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_hours = expire_hours

    def issue(self, user: User, expires_delta: Optional[timedelta] = None) -> str:
        expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=self.expire_hours))
        to_encode = {"sub": str(user.id), "role": user.role, "exp": expire}
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        """期限切れ・改ざん・形式不正はすべて Unauthenticated"""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            raise Unauthenticated("Unauthorized: Invalid token")

        user_id = payload.get("sub")
        role = payload.get("role")
        if not user_id or role is None:
            raise Unauthenticated("Unauthorized: Invalid token")
        try:
            return Identity(user_id=user_id, role=Role(role))
        except ValueError:
            raise Unauthenticated("Unauthorized: Invalid token")


class CredentialStore:
    """ユーザー登録とログイン"""

    @staticmethod
    def find_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def create_user(db: Session, name: str, email: str, password: str,
                    role: str = Role.STAFF.value, status: str = "Active") -> User:
        if CredentialStore.find_by_email(db, email):
            raise Conflict("User already exists")

        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role,
            status=status,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("User already exists")
        db.refresh(user)
        return user

    @staticmethod
    def signup(db: Session, name: str, email: str, password: str) -> User:
        """最初の1人は Admin、以降は入力に関わらず Cashier"""
        is_first_user = db.query(User).count() == 0
        role = Role.ADMIN.value if is_first_user else Role.CASHIER.value
        return CredentialStore.create_user(db, name, email, password, role=role)

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> User:
        user = CredentialStore.find_by_email(db, email)
        # 未登録メールとパスワード不一致は同じエラーにする
        if not user or not verify_password(password, user.password_hash):
            raise Unauthenticated(INVALID_CREDENTIALS)
        if not user.is_active:
            raise Forbidden("This account is inactive")
        return user

    @staticmethod
    def login(db: Session, issuer: SessionIssuer, email: str, password: str) -> Tuple[User, str]:
        user = CredentialStore.authenticate(db, email, password)
        user.last_login = datetime.utcnow()
        db.commit()
        db.refresh(user)
        return user, issuer.issue(user)

    @staticmethod
    def change_password(db: Session, user: User, old_password: str, new_password: str) -> User:
        if not verify_password(old_password, user.password_hash):
            raise Unauthenticated("Current password is incorrect")
        user.password_hash = hash_password(new_password)
        user.updated_at = datetime.utcnow()
        db.commit()
        return user
