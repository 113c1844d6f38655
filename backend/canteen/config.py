import os
import sys
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

# アプリケーションバージョン
VERSION = "1.2.0"

# 本番環境では必ず環境変数 SECRET_KEY に長いランダム文字列を設定すること
DEFAULT_SECRET_KEY = "change-this-secret-key-in-production-32chars"


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Settings:
    database_url: str = "sqlite:///./canteen.db"
    debug: bool = False
    cors_origins: List[str] = field(default_factory=list)
    secret_key: str = DEFAULT_SECRET_KEY
    algorithm: str = "HS256"
    access_token_expire_hours: int = 24
    # 未設定時は「認証済みなら全ロール許可」のまま
    enforce_role_permissions: bool = False
    login_max_attempts: int = 5
    login_window_seconds: int = 300
    api_max_requests: int = 100
    api_window_seconds: int = 60
    sql_echo: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()

        _cors_env = os.getenv("CORS_ORIGINS", "")
        settings = cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./canteen.db"),
            debug=_env_bool("DEBUG"),
            cors_origins=_cors_env.split(",") if _cors_env else [],
            secret_key=os.getenv("SECRET_KEY", DEFAULT_SECRET_KEY),
            access_token_expire_hours=int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", "24")),
            enforce_role_permissions=_env_bool("ENFORCE_ROLE_PERMISSIONS"),
            login_max_attempts=int(os.getenv("LOGIN_MAX_ATTEMPTS", "5")),
            login_window_seconds=int(os.getenv("LOGIN_WINDOW_SECONDS", "300")),
            api_max_requests=int(os.getenv("API_MAX_REQUESTS", "100")),
            api_window_seconds=int(os.getenv("API_WINDOW_SECONDS", "60")),
            sql_echo=_env_bool("SQL_ECHO"),
        )

        # 本番環境でデフォルトキーのまま起動しようとした場合は起動を拒否
        if not settings.debug and settings.secret_key == DEFAULT_SECRET_KEY:
            print(
                "[SECURITY ERROR] DEBUG=false but SECRET_KEY is still the built-in default. "
                "Set SECRET_KEY to a long random string.",
                file=sys.stderr,
            )
            sys.exit(1)
        return settings
