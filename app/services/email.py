from typing import Optional, Dict, Any
from urllib.parse import urljoin
from threading import Thread
from flask import current_app, render_template
from flask_mail import Message
from app.extensions import db, mail
from app.models import Complaint, EmailLog
import json
import time

NEW_COMPLAINT_TEMPLATE = "complaint_received"

def _log_structured(event: str, level: str = "info", **fields):
    """
    Minimal structured log: one JSON object per line.
    (No PII beyond recipient email; keep values simple.)
    """
    payload = {"event": event, **fields}
    getattr(current_app.logger, level)(json.dumps(payload))

def absolute_url(path: str) -> str:
    base = current_app.config["APP_BASE_URL"].rstrip("/") + "/"
    path = path.lstrip("/")
    return urljoin(base, path)

def send_email(to_email: str, subject: str, template: str, context: Optional[Dict[str, Any]] = None, complaint_id: Optional[str] = None) -> bool:
    """
    template: basename under templates/email/ without extension (e.g., 'complaint_received')
    Renders both HTML and plaintext. Returns True when the transport accepted the message.
    """
    context = context or {}
    html_body = render_template(f"email/{template}.html", **context)
    text_body = render_template(f"email/{template}.txt", **context)

    msg = Message(
        recipients=[to_email],
        subject=subject,
    )
    msg.body = text_body
    msg.html = html_body

    # Persist an initial log
    elog = EmailLog(
        complaint_id=complaint_id,
        to_email=to_email.lower(),
        template=template,
        subject=subject,
        status="queued",
        meta={},
    )
    db.session.add(elog)
    db.session.commit()

    start = time.perf_counter()
    try:
        mail.send(msg)  # Flask-Mail returns None; provider capture varies by backend
    except Exception as ex:
        latency_ms = int((time.perf_counter() - start) * 1000)
        elog.status = "failed"
        elog.meta = {"error": str(ex)}
        db.session.commit()
        _log_structured(
            "mail_send", level="warning",
            template=template, to=to_email.lower(), subject=subject,
            outcome="smtp_error", latency_ms=latency_ms, smtp_error=str(ex),
        )
        return False

    latency_ms = int((time.perf_counter() - start) * 1000)
    elog.status = "sent"
    db.session.commit()
    _log_structured(
        "mail_send",
        template=template, to=to_email.lower(), subject=subject,
        outcome="sent", latency_ms=latency_ms,
    )
    return True

def notify_new_complaint(complaint: Complaint) -> bool:
    """Email the configured admin address about a new complaint. Never raises."""
    to_email = current_app.config.get("ADMIN_EMAIL")
    if not to_email:
        current_app.logger.warning("ADMIN_EMAIL not configured; skipping new-complaint notification")
        return False

    subject = f"New {complaint.priority} Priority Complaint - {complaint.category}"
    ctx = {
        "site_name": current_app.config.get("SITE_NAME", "Complaint Desk"),
        "complaint": complaint,
        "dashboard_url": absolute_url("admin"),
    }
    try:
        return send_email(
            to_email=to_email,
            subject=subject,
            template=NEW_COMPLAINT_TEMPLATE,
            context=ctx,
            complaint_id=complaint.id,
        )
    except Exception:
        db.session.rollback()
        current_app.logger.exception("New-complaint notification failed (non-blocking)")
        return False

def _notify_in_background(app, complaint_id: str) -> None:
    with app.app_context():
        try:
            complaint = db.session.execute(
                db.select(Complaint).where(Complaint.id == complaint_id)
            ).scalar_one_or_none()
            if complaint is None:
                app.logger.warning("Notification skipped; complaint %s not found", complaint_id)
                return
            notify_new_complaint(complaint)
        except Exception:
            app.logger.exception("New-complaint notification failed (non-blocking)")
        finally:
            db.session.remove()

def dispatch_new_complaint_notification(complaint: Complaint) -> None:
    """Fire-and-forget: the caller's response never waits on or fails because of mail."""
    try:
        if not current_app.config.get("NOTIFY_ASYNC", True):
            notify_new_complaint(complaint)
            return
        app = current_app._get_current_object()
        Thread(
            target=_notify_in_background,
            args=(app, complaint.id),
            name=f"notify-{complaint.id}",
            daemon=True,
        ).start()
    except Exception:
        current_app.logger.exception("Could not schedule new-complaint notification")
