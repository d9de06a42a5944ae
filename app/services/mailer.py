"""Transporte de correo para los recordatorios.

El envío real usa smtplib en un hilo aparte, con un timeout total por
mensaje: si vence, el envío cuenta como fallido.
"""

import asyncio
import logging
import smtplib
import ssl
from abc import ABC, abstractmethod
from email.errors import MessageError
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.config import get_settings
from app.utils.errors import MailDeliveryError

logger = logging.getLogger(__name__)
settings = get_settings()


class MailTransport(ABC):
    """Interfaz del transporte de correo."""

    @abstractmethod
    async def send(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: str | None = None,
    ) -> None:
        """
        Entrega un mensaje al transporte.

        Raises:
            MailDeliveryError: si el transporte rechaza o no responde
        """
        pass


class SMTPMailer(MailTransport):
    """Envía correos vía SMTP (SSL en el puerto 465, STARTTLS en los demás)."""

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        sender: str | None = None,
        use_tls: bool | None = None,
        timeout: float | None = None,
    ):
        self.host = host or settings.smtp_host
        self.port = port or settings.smtp_port
        self.username = username if username is not None else settings.smtp_username
        self.password = password if password is not None else settings.smtp_password
        self.sender = sender or settings.sender_address
        self.use_tls = settings.smtp_use_tls if use_tls is None else use_tls
        self.timeout = timeout or settings.smtp_timeout

    def build_message(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: str | None = None,
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to

        if text_body:
            msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))
        return msg

    def _deliver(self, msg: MIMEMultipart) -> None:
        """Entrega bloqueante; corre fuera del event loop."""
        context = ssl.create_default_context()

        if self.port == 465:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=context) as server:
                if self.username:
                    server.login(self.username, self.password)
                server.send_message(msg)
            return

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls(context=context)
            if self.username:
                server.login(self.username, self.password)
            server.send_message(msg)

    async def send(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: str | None = None,
    ) -> None:
        try:
            msg = self.build_message(to, subject, html_body, text_body)
            await asyncio.wait_for(
                asyncio.to_thread(self._deliver, msg),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise MailDeliveryError(
                f"Timeout de {self.timeout}s enviando a {to}",
                details={"to": to},
            ) from e
        except (smtplib.SMTPException, OSError, MessageError, ValueError) as e:
            # ValueError cubre UnicodeError y los encabezados con saltos de línea
            raise MailDeliveryError(
                f"{type(e).__name__}: {e}",
                details={"to": to, "host": self.host},
            ) from e

        logger.info(f"Correo enviado a {to}: {subject}")


# Singleton
_mailer: MailTransport | None = None


def get_mailer() -> MailTransport:
    """Obtiene la instancia del transporte de correo."""
    global _mailer
    if _mailer is None:
        _mailer = SMTPMailer()
    return _mailer
