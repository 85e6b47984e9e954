"""
Scheduled jobs, triggered by cron (or by an admin) over HTTP.
Both are safe to run twice: allocation is keyed per billing period, reminders are flagged once sent.
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from nikkah.auth import get_current_user_admin
from nikkah.database import get_db
from nikkah.models.user import User
from nikkah.services.allocation import run_monthly_allocation
from nikkah.services.notifications import NotificationSink, get_notification_sink
from nikkah.services.reminders import send_request_reminders

router = APIRouter(prefix="/api/admin/jobs", tags=["admin-jobs"])
logger = logging.getLogger(__name__)


@router.post("/allocate-monthly-requests")
def allocate_monthly_requests(
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    results = run_monthly_allocation(db)
    summary = {
        "total": len(results),
        "successful": sum(1 for r in results if r.success and not r.skipped),
        "skipped": sum(1 for r in results if r.skipped),
        "failed": sum(1 for r in results if not r.success),
    }
    logger.info("Monthly allocation finished: %s", summary)
    return {"message": "Monthly request allocation completed", "summary": summary, "results": [r.to_dict() for r in results]}


@router.post("/send-request-reminders")
def send_reminders(
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
):
    sent = send_request_reminders(db, sink=sink)
    return {"message": "Request reminders sent", "sent": sent, "total": sum(sent.values())}
