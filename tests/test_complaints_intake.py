import httpx
from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db, mail
from app.models import Complaint, EmailLog
from app.services import email as email_service


DELAYED = {
    "category": "Delayed Delivery",
    "sentiment": "Negative",
    "priority": "High",
    "ai_response": "We apologize...",
    "confidence_score": 82,
}


def _predict(payload):
    return lambda request: httpx.Response(200, json=payload)


def _count(app):
    with app.app_context():
        return db.session.query(Complaint).count()


def test_submit_stores_prediction(app, client, ml_service):
    ml_service(_predict(DELAYED))
    resp = client.post("/complaints", json={"complaint_text": "My package was delayed by 5 days"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    c = body["complaint"]
    assert c["category"] == "Delayed Delivery"
    assert c["sentiment"] == "Negative"
    assert c["priority"] == "High"
    assert c["ai_response"] == "We apologize..."
    assert c["ai_confidence_score"] == 82
    assert c["ai_explanation"] == ""
    assert c["status"] == "Pending"
    assert c["feedback_helpful"] is None
    assert c["user_id"] is None and c["user_email"] is None

    with app.app_context():
        row = db.session.execute(db.select(Complaint).where(Complaint.id == c["id"])).scalar_one()
        assert row.complaint_text == "My package was delayed by 5 days"
        assert (row.category, row.sentiment, row.priority) == ("Delayed Delivery", "Negative", "High")
        assert row.ai_confidence_score == 82
        assert row.status == "Pending"
        assert row.feedback_helpful is None
        assert row.created_at is not None and row.updated_at is not None


def test_submit_without_inference_service_uses_fallback(app, client):
    resp = client.post("/complaints", json={"complaint_text": "Where is my parcel?"})
    assert resp.status_code == 200
    c = resp.get_json()["complaint"]
    assert c["category"] == "Other"
    assert c["sentiment"] == "Neutral"
    assert c["priority"] == "Low"
    assert c["ai_confidence_score"] == 50
    assert c["ai_response"]
    assert c["status"] == "Pending"


def test_submit_with_incomplete_prediction_uses_fallback(app, client, ml_service):
    ml_service(_predict({"category": "Lost Package", "sentiment": "Negative"}))
    resp = client.post("/complaints", json={"complaint_text": "Parcel lost"})
    assert resp.status_code == 200
    c = resp.get_json()["complaint"]
    assert (c["category"], c["priority"], c["ai_confidence_score"]) == ("Other", "Low", 50)


def test_submit_blank_text_rejected_without_write(app, client):
    for body in ({"complaint_text": ""}, {"complaint_text": "   \n\t"}, {}, {"complaint_text": 42}):
        resp = client.post("/complaints", json=body)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Complaint text is required"
    assert _count(app) == 0


def test_submit_non_json_body_rejected(app, client):
    resp = client.post("/complaints", data="not json", content_type="text/plain")
    assert resp.status_code == 400
    assert _count(app) == 0


def test_submit_trims_text(app, client):
    resp = client.post("/complaints", json={"complaint_text": "  Damaged box  "})
    assert resp.get_json()["complaint"]["complaint_text"] == "Damaged box"


def test_submit_authenticated_records_owner(app, client, make_user):
    user_id, headers = make_user(email="owner@example.com")
    resp = client.post("/complaints", json={"complaint_text": "Late again"}, headers=headers)
    assert resp.status_code == 200
    c = resp.get_json()["complaint"]
    assert c["user_id"] == user_id
    assert c["user_email"] == "owner@example.com"


def test_submit_with_bad_token_is_guest_submission(app, client):
    resp = client.post(
        "/complaints",
        json={"complaint_text": "Late again"},
        headers={"Authorization": "Bearer not-a-real-token"},
    )
    assert resp.status_code == 200
    c = resp.get_json()["complaint"]
    assert c["user_id"] is None and c["user_email"] is None


def test_submit_with_malformed_header_is_guest_submission(app, client):
    resp = client.post(
        "/complaints",
        json={"complaint_text": "Late again"},
        headers={"Authorization": "Basic dXNlcjpwYXNz"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["complaint"]["user_id"] is None


def test_submit_persistence_failure_returns_500(app, client, monkeypatch):
    def _fail():
        raise SQLAlchemyError("database unavailable")
    monkeypatch.setattr(db.session, "commit", _fail)

    resp = client.post("/complaints", json={"complaint_text": "Late again"})
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "Failed to save complaint"

    monkeypatch.undo()
    assert _count(app) == 0


def test_submit_sends_notification(app, client, monkeypatch):
    monkeypatch.setitem(app.config, "ADMIN_EMAIL", "Admin@Example.com")
    with mail.record_messages() as outbox:
        resp = client.post("/complaints", json={"complaint_text": "Package never arrived"})
    assert resp.status_code == 200
    complaint_id = resp.get_json()["complaint"]["id"]

    assert len(outbox) == 1
    msg = outbox[0]
    assert msg.recipients == ["Admin@Example.com"]
    assert msg.subject == "New Low Priority Complaint - Other"
    assert complaint_id in msg.body
    assert "Package never arrived" in msg.html

    with app.app_context():
        log = db.session.query(EmailLog).one()
        assert log.status == "sent"
        assert log.to_email == "admin@example.com"
        assert log.complaint_id == complaint_id


def test_notification_failure_does_not_fail_submission(app, client, monkeypatch):
    monkeypatch.setitem(app.config, "ADMIN_EMAIL", "admin@example.com")

    def _smtp_down(msg):
        raise ConnectionRefusedError("smtp down")
    monkeypatch.setattr(email_service.mail, "send", _smtp_down)

    resp = client.post("/complaints", json={"complaint_text": "Package never arrived"})
    assert resp.status_code == 200
    assert resp.get_json()["success"] is True

    with app.app_context():
        assert db.session.query(Complaint).count() == 1
        log = db.session.query(EmailLog).one()
        assert log.status == "failed"
        assert "smtp down" in log.meta["error"]


def test_notification_skipped_without_recipient(app, client):
    with mail.record_messages() as outbox:
        resp = client.post("/complaints", json={"complaint_text": "Package never arrived"})
    assert resp.status_code == 200
    assert outbox == []
    with app.app_context():
        assert db.session.query(EmailLog).count() == 0


def test_notification_runs_detached_when_async(app, client, monkeypatch):
    monkeypatch.setitem(app.config, "NOTIFY_ASYNC", True)
    started = []

    class _FakeThread:
        def __init__(self, target, args, name, daemon):
            self.target, self.args, self.daemon = target, args, daemon

        def start(self):
            started.append(self)

    monkeypatch.setattr(email_service, "Thread", _FakeThread)

    resp = client.post("/complaints", json={"complaint_text": "Package never arrived"})
    assert resp.status_code == 200
    assert len(started) == 1
    assert started[0].daemon is True
    assert started[0].target is email_service._notify_in_background
    assert started[0].args[1] == resp.get_json()["complaint"]["id"]


def test_background_notification_loads_complaint(app, client, monkeypatch):
    monkeypatch.setitem(app.config, "ADMIN_EMAIL", "admin@example.com")
    resp = client.post("/complaints", json={"complaint_text": "Package never arrived"})
    complaint_id = resp.get_json()["complaint"]["id"]

    with mail.record_messages() as outbox:
        email_service._notify_in_background(app, complaint_id)
    assert len(outbox) == 1


def test_preflight_returns_cors_headers(client):
    resp = client.options(
        "/complaints",
        headers={
            "Origin": "http://dashboard.test",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type, Authorization",
        },
    )
    assert resp.status_code == 200
    assert resp.data == b""
    assert resp.headers.get("Access-Control-Allow-Origin") == "*"
    allowed = resp.headers.get("Access-Control-Allow-Methods", "")
    for method in ("GET", "POST", "PUT"):
        assert method in allowed


def test_error_responses_carry_cors_headers(client):
    resp = client.post(
        "/complaints",
        json={"complaint_text": ""},
        headers={"Origin": "http://dashboard.test"},
    )
    assert resp.status_code == 400
    assert resp.headers.get("Access-Control-Allow-Origin") == "*"
