"""
Servicio de notificaciones por correo para el flujo de órdenes.

Los correos son "fire-and-forget": se encolan como tareas en segundo plano de
FastAPI y cualquier fallo de SMTP se registra en el log sin afectar la
respuesta HTTP que los originó.
"""
from decimal import Decimal
from email.message import EmailMessage
from enum import Enum
from typing import Optional, Tuple
import html
import logging
import smtplib

from fastapi import BackgroundTasks
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import UpstreamNotificationError
from app.crud import user as user_crud
from app.models.order import Order

logger = logging.getLogger(__name__)


class NotificationTemplate(str, Enum):
    REQUEST = "REQUEST"
    NEW_ORDER = "NEW ORDER"
    CONFIRM = "CONFIRM"


class EmailNotification(BaseModel):
    """Payload de un correo. Solo valores planos: se procesa fuera de la sesión de BD."""
    to: str
    template: NotificationTemplate
    order_id: int
    reference: str
    amount: Optional[Decimal] = None
    customer_name: Optional[str] = None
    tracking_link: Optional[str] = None

    @classmethod
    def for_order(cls, order: Order, *, to: str, template: NotificationTemplate) -> "EmailNotification":
        return cls(
            to=to,
            template=template,
            order_id=order.id,
            reference=order.reference,
            amount=order.total_amount,
            customer_name=order.shipping_name,
            tracking_link=order.tracking_link,
        )


SUBJECTS = {
    NotificationTemplate.REQUEST: "We received your order {reference}",
    NotificationTemplate.NEW_ORDER: "New order {reference} awaiting payment verification",
    NotificationTemplate.CONFIRM: "Payment confirmed for order {reference}",
}

BODIES = {
    NotificationTemplate.REQUEST: (
        "<p>Hi {customer_name},</p>"
        "<p>Thank you for your order <b>{reference}</b> of ₹{amount}. "
        "We have received your UPI transaction id and will confirm your payment shortly.</p>"
    ),
    NotificationTemplate.NEW_ORDER: (
        "<p>A new order <b>{reference}</b> of ₹{amount} was placed by {customer_name}.</p>"
        "<p>Check the UPI transaction in the bank app and verify the payment from the admin panel.</p>"
    ),
    NotificationTemplate.CONFIRM: (
        "<p>Hi {customer_name},</p>"
        "<p>Your payment for order <b>{reference}</b> has been confirmed and your order is on its way.</p>"
        "{tracking}"
    ),
}


class EmailNotifier:
    """
    Servicio singleton de envío de correos vía SMTP.

    Si `SMTP_HOST` no está configurado (desarrollo, tests) los correos se
    registran en el log y no se envían.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def render(self, notification: EmailNotification) -> Tuple[str, str]:
        # Nombre y link los escribe un usuario; se escapan antes de ir al HTML
        tracking = ""
        if notification.tracking_link:
            link = html.escape(notification.tracking_link)
            tracking = f'<p>Track your shipment: <a href="{link}">{link}</a></p>'
        context = {
            "reference": notification.reference,
            "amount": notification.amount if notification.amount is not None else "",
            "customer_name": html.escape(notification.customer_name or "customer"),
            "tracking": tracking,
        }
        subject = SUBJECTS[notification.template].format(**context)
        body = BODIES[notification.template].format(**context)
        return subject, body

    def send(self, notification: EmailNotification) -> None:
        """
        Envía el correo de forma síncrona.

        Raises:
            `UpstreamNotificationError`: si el servidor SMTP falla
        """
        subject, body = self.render(notification)

        if not settings.SMTP_HOST:
            logger.info(f"SMTP no configurado; correo '{subject}' para {notification.to} omitido")
            return

        message = EmailMessage()
        message["From"] = settings.MAIL_FROM
        message["To"] = notification.to
        message["Subject"] = subject
        message.set_content(body, subtype="html")

        try:
            with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT) as smtp:
                smtp.starttls()
                if settings.SMTP_USER:
                    smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise UpstreamNotificationError(f"Error enviando correo a {notification.to}: {e}") from e

        logger.info(f"Correo {notification.template.value} enviado a {notification.to} ({notification.reference})")

    def dispatch(self, notification: EmailNotification) -> bool:
        """
        Envía el correo tragándose los errores. Es lo que corre en segundo plano.
        """
        try:
            self.send(notification)
        except UpstreamNotificationError as e:
            logger.error(str(e))
            return False
        except Exception as e:
            logger.error(f"Error inesperado enviando correo a {notification.to}: {e}", exc_info=True)
            return False
        return True

    def enqueue(self, background_tasks: BackgroundTasks, notification: EmailNotification) -> None:
        background_tasks.add_task(self.dispatch, notification)

    def notify_all_admins(
        self,
        background_tasks: BackgroundTasks,
        db: Session,
        *,
        order: Order,
        template: NotificationTemplate = NotificationTemplate.NEW_ORDER,
    ) -> int:
        """
        Encola un correo por cada cuenta con rol admin.

        Returns:
            Número de administradores notificados
        """
        admins = user_crud.get_admins(db)
        for admin in admins:
            self.enqueue(
                background_tasks,
                EmailNotification.for_order(order, to=admin.email, template=template),
            )
        if not admins:
            logger.warning(f"No hay administradores para notificar la orden {order.reference}")
        return len(admins)


notifier = EmailNotifier()
