import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError

from canteen.database import Database
from canteen.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def client_info(request: Request):
    """(IPアドレス, User-Agent)"""
    ip_address = request.client.host if request.client else "unknown"
    user_agent = request.headers.get("user-agent", "unknown")
    return ip_address, user_agent


class AuditLogger:
    """監査イベントを audit_logs テーブルに記録する。書き込み失敗で本処理は止めない"""

    def __init__(self, database: Database):
        self.database = database

    def log_event(
        self,
        event_type: str,
        ip_address: str,
        user_id: Optional[str] = None,
        username: Optional[str] = None,
        user_agent: Optional[str] = None,
        resource: Optional[str] = None,
        action: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        success: bool = False,
        status_code: Optional[int] = None,
    ):
        session = self.database.session()
        try:
            session.add(AuditLog(
                timestamp=datetime.utcnow(),
                event_type=event_type,
                user_id=user_id,
                username=username,
                ip_address=ip_address,
                user_agent=user_agent,
                resource=resource,
                action=action,
                details=details or {},
                success=success,
                status_code=status_code,
            ))
            session.commit()
            logger.debug("Audit event recorded: %s - %s (%s)", event_type, username, ip_address)
        except SQLAlchemyError as e:
            session.rollback()
            logger.warning("Error logging audit event %s (will continue): %s", event_type, e)
        finally:
            session.close()

    def log_request(self, request: Request, event_type: str, user=None, success: bool = True,
                    status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None,
                    username: Optional[str] = None):
        """リクエスト情報とユーザーから監査イベントを記録"""
        ip_address, user_agent = client_info(request)
        self.log_event(
            event_type=event_type,
            ip_address=ip_address,
            user_id=user.id if user is not None else None,
            username=user.email if user is not None else username,
            user_agent=user_agent,
            resource=request.url.path,
            action=request.method,
            details=details,
            success=success,
            status_code=status_code,
        )
