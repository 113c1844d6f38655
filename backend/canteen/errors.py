"""
サービス・ルート共通のエラー定義

サービスはこれらを送出し、canteen.main に登録したハンドラーが
対応するステータスコードの {"detail": ...} レスポンスに変換する。
"""

from typing import Dict, Optional


class CanteenError(Exception):
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None


class InvalidInput(CanteenError):
    status_code = 400
    default_detail = "Invalid input"


class Conflict(CanteenError):
    status_code = 409
    default_detail = "Resource already exists"


class Unauthenticated(CanteenError):
    status_code = 401
    default_detail = "Unauthorized"

    @property
    def headers(self):
        return {"WWW-Authenticate": "Bearer"}


class Forbidden(CanteenError):
    status_code = 403
    default_detail = "Forbidden"


class NotFound(CanteenError):
    status_code = 404
    default_detail = "Not found"


class InvalidState(CanteenError):
    status_code = 400
    default_detail = "Operation not allowed in the current state"


class Internal(CanteenError):
    status_code = 500
