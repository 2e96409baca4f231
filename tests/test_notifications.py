import smtplib
from decimal import Decimal

import pytest
from fastapi import BackgroundTasks

from app.core.config import settings
from app.core.exceptions import UpstreamNotificationError
from app.services.notifications import EmailNotification, EmailNotifier, NotificationTemplate, notifier


def make_notification(template=NotificationTemplate.CONFIRM, **fields):
    data = {
        "to": "asha@example.com",
        "template": template,
        "order_id": 42,
        "reference": "ORD-000042",
        "amount": Decimal("350.00"),
        "customer_name": "Asha",
    }
    data.update(fields)
    return EmailNotification(**data)


class BrokenSMTP:
    def __init__(self, *args, **kwargs):
        raise smtplib.SMTPConnectError(421, "service not available")


class RecordingSMTP:
    sent = []

    def __init__(self, host, port, timeout=None):
        self.host = host

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        pass

    def send_message(self, message):
        RecordingSMTP.sent.append(message)


def test_notifier_is_singleton():
    assert EmailNotifier() is notifier


def test_render_templates_include_order_reference():
    for template in NotificationTemplate:
        subject, body = notifier.render(make_notification(template))
        assert "ORD-000042" in subject
        assert "ORD-000042" in body


def test_confirmation_includes_tracking_link():
    _, body = notifier.render(make_notification(tracking_link="https://track.example.com/T1"))
    assert "https://track.example.com/T1" in body


def test_render_escapes_customer_name_and_tracking_link():
    notification = make_notification(
        customer_name="<script>alert(1)</script>",
        tracking_link='https://track.example.com/T1"><img src=x>',
    )

    _, body = notifier.render(notification)

    assert "<script>" not in body
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in body
    assert "<img" not in body
    assert "&quot;&gt;&lt;img src=x&gt;" in body


def test_send_without_smtp_host_is_skipped(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", None)
    monkeypatch.setattr(smtplib, "SMTP", BrokenSMTP)

    notifier.send(make_notification())


def test_send_uses_smtp(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(smtplib, "SMTP", RecordingSMTP)
    RecordingSMTP.sent = []

    notifier.send(make_notification(NotificationTemplate.REQUEST))

    assert len(RecordingSMTP.sent) == 1
    message = RecordingSMTP.sent[0]
    assert message["To"] == "asha@example.com"
    assert "ORD-000042" in message["Subject"]


def test_send_failure_raises_upstream_error(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(smtplib, "SMTP", BrokenSMTP)

    with pytest.raises(UpstreamNotificationError):
        notifier.send(make_notification())


def test_dispatch_swallows_failures(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(smtplib, "SMTP", BrokenSMTP)

    assert notifier.dispatch(make_notification()) is False


def test_notify_all_admins_enqueues_one_task_per_admin(db, make_user, buyer):
    from app.models import Order

    first, second = make_user(role="admin"), make_user(role="admin")
    db_order = Order(user_id=buyer.id, total_amount=Decimal("120.00"), shipping_name=buyer.name)
    db.add(db_order)
    db.commit()
    background_tasks = BackgroundTasks()

    notified = notifier.notify_all_admins(background_tasks, db, order=db_order)

    assert notified == 2
    recipients = [task.args[0].to for task in background_tasks.tasks]
    assert recipients == [first.email, second.email]
    assert all(task.args[0].template == NotificationTemplate.NEW_ORDER for task in background_tasks.tasks)
