from types import SimpleNamespace
from datetime import datetime

from app.extensions import db, mail
from app.models import EmailLog
from app.services import email as email_service


def _complaint(**kw):
    values = dict(
        id="c-123",
        complaint_text="Parcel <b>lost</b>",
        category="Lost Package",
        sentiment="Negative",
        priority="High",
        ai_response="We are tracing it.",
        ai_confidence_score=91,
        created_at=datetime(2025, 12, 19, 8, 30),
    )
    values.update(kw)
    return SimpleNamespace(**values)


def test_email_templates_render_complaint_fields(app):
    with app.app_context():
        ctx = dict(complaint=_complaint(), dashboard_url="http://example.test/admin", site_name="Complaint Desk")
        html = app.jinja_env.get_template("email/complaint_received.html").render(**ctx)
        txt = app.jinja_env.get_template("email/complaint_received.txt").render(**ctx)

    for body in (html, txt):
        assert "c-123" in body
        assert "Lost Package" in body
        assert "91%" in body
        assert "http://example.test/admin" in body
        assert "2025-12-19 08:30 UTC" in body
    # Complaint text is user input: escaped in HTML
    assert "&lt;b&gt;lost&lt;/b&gt;" in html
    assert "<b>lost</b>" not in html


def test_absolute_url(app):
    with app.test_request_context():
        assert email_service.absolute_url("/admin") == "http://example.test/admin"


def test_send_email_logs_sent(app):
    with app.app_context():
        with mail.record_messages() as outbox:
            ok = email_service.send_email(
                to_email="Ops@Example.com",
                subject="New High Priority Complaint - Lost Package",
                template="complaint_received",
                context=dict(complaint=_complaint(), dashboard_url="x", site_name="y"),
            )
        assert ok is True
        assert len(outbox) == 1
        log = db.session.query(EmailLog).one()
        assert (log.status, log.to_email, log.template) == ("sent", "ops@example.com", "complaint_received")


def test_notify_without_recipient_is_noop(app, monkeypatch):
    monkeypatch.setitem(app.config, "ADMIN_EMAIL", None)
    with app.app_context():
        assert email_service.notify_new_complaint(_complaint()) is False
        assert db.session.query(EmailLog).count() == 0


def test_notify_swallows_render_errors(app, monkeypatch):
    monkeypatch.setitem(app.config, "ADMIN_EMAIL", "ops@example.com")

    def _broken(*args, **kwargs):
        raise RuntimeError("template missing")
    monkeypatch.setattr(email_service, "render_template", _broken)

    with app.app_context():
        assert email_service.notify_new_complaint(_complaint()) is False
