import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from canteen.config import VERSION, Settings
from canteen.database import Database
from canteen.errors import CanteenError
from canteen.routes import audit, auth, dashboard, health, inventory, orders, users
from canteen.routes.catalog import discounts_router, products_router, suppliers_router
from canteen.services.auth_service import SessionIssuer
from canteen.utils.audit_logger import AuditLogger
from canteen.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """アプリ1インスタンス分の共有状態（DB・署名鍵・レート制限）"""
    settings: Settings
    database: Database
    issuer: SessionIssuer
    audit: AuditLogger
    login_limiter: RateLimiter
    api_limiter: RateLimiter

    @classmethod
    def build(cls, settings: Settings) -> "AppContext":
        database = Database(settings.database_url, echo=settings.sql_echo)
        return cls(
            settings=settings,
            database=database,
            issuer=SessionIssuer(settings.secret_key, settings.algorithm, settings.access_token_expire_hours),
            audit=AuditLogger(database),
            login_limiter=RateLimiter(settings.login_max_attempts, settings.login_window_seconds),
            api_limiter=RateLimiter(settings.api_max_requests, settings.api_window_seconds),
        )

    def close(self):
        self.database.dispose()


# HTTPセキュリティヘッダーミドルウェア
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'self'; frame-ancestors 'none';"
        if not request.app.state.context.settings.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


# API全体レート制限ミドルウェア（IP単位）
class APIRateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith("/api/"):
            limiter = request.app.state.context.api_limiter
            ip_address = request.client.host if request.client else "unknown"
            if not limiter.is_allowed(ip_address):
                remaining = limiter.get_remaining_time(ip_address)
                return JSONResponse(
                    status_code=429,
                    content={"detail": f"Too many requests. Try again in {remaining} seconds"},
                )
        return await call_next(request)


async def canteen_error_handler(request: Request, exc: CanteenError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("[ERROR] %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    context = AppContext.build(settings)
    # テーブル作成
    context.database.create_all()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        context.close()

    # DEBUGモード時のみドキュメントエンドポイントを公開
    app = FastAPI(
        title="Canteen POS API",
        description="Canteen point-of-sale and back-office API",
        version=VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.context = context

    app.add_exception_handler(CanteenError, canteen_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    # セキュリティヘッダーミドルウェア（CORSより前に登録）
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(APIRateLimitMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins or ["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    # ルート登録
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(products_router)
    app.include_router(inventory.router)
    app.include_router(orders.router)
    app.include_router(suppliers_router)
    app.include_router(discounts_router)
    app.include_router(dashboard.router)
    app.include_router(audit.router)
    return app


def run():
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
