from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from canteen.database import get_db
from canteen.models.audit_log import AuditLog
from canteen.utils.jwt_auth import get_context, require_admin

router = APIRouter(prefix="/api/admin", tags=["audit"])


@router.get("/audit-logs")
def get_audit_logs(
    request: Request,
    current_user=Depends(require_admin),
    event_type: str = Query(None),
    days: int = Query(7, ge=1, le=90),
    limit: int = Query(500, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """監査ログを取得（管理者のみ）"""
    get_context(request).audit.log_request(request, "audit_logs_accessed", user=current_user, status_code=200)

    # 指定日数前から現在までのログを取得
    cutoff_date = datetime.utcnow() - timedelta(days=days)
    query = db.query(AuditLog).filter(AuditLog.timestamp >= cutoff_date)
    if event_type:
        query = query.filter(AuditLog.event_type == event_type)

    # 新しいものから順に取得
    logs = query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()

    return {
        "logs": [
            {
                "id": log.id,
                "timestamp": log.timestamp.isoformat(),
                "eventType": log.event_type,
                "userId": log.user_id,
                "username": log.username,
                "ipAddress": log.ip_address,
                "userAgent": log.user_agent,
                "resource": log.resource,
                "action": log.action,
                "success": log.success,
                "statusCode": log.status_code,
                "details": log.details,
            }
            for log in logs
        ],
        "total": len(logs),
        "daysLookback": days,
        "limitUsed": limit,
    }


@router.get("/audit-stats")
def get_audit_stats(
    current_user=Depends(require_admin),
    days: int = Query(7, ge=1, le=90),
    db: Session = Depends(get_db),
):
    """イベント種別ごとの件数（管理者のみ）"""
    cutoff_date = datetime.utcnow() - timedelta(days=days)

    counts = (
        db.query(AuditLog.event_type, func.count(AuditLog.id))
        .filter(AuditLog.timestamp >= cutoff_date)
        .group_by(AuditLog.event_type)
        .all()
    )
    failed_logins = (
        db.query(AuditLog.username, func.count(AuditLog.id).label("attempts"))
        .filter(AuditLog.timestamp >= cutoff_date, AuditLog.event_type == "login_failure")
        .group_by(AuditLog.username)
        .order_by(func.count(AuditLog.id).desc())
        .limit(10)
        .all()
    )

    return {
        "eventCounts": {event_type: count for event_type, count in counts},
        "failedLogins": [{"username": username, "attempts": attempts} for username, attempts in failed_logins],
        "daysLookback": days,
    }
