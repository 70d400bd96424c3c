import logging
import smtplib
import ssl
from email.message import EmailMessage
import html
from typing import Optional

from app.core.config import Settings

logger = logging.getLogger(__name__)


class EmailService:
    @staticmethod
    def _from_header(settings: Settings) -> Optional[str]:
        if settings.smtp_from:
            return settings.smtp_from
        if settings.smtp_from_email and settings.smtp_from_name:
            return f"{settings.smtp_from_name} <{settings.smtp_from_email}>"
        if settings.smtp_from_email:
            return settings.smtp_from_email
        return None

    @staticmethod
    def _render_code_template(*, app_name: str, title: str, code: str, expires_in_minutes: int) -> str:
        app_name_esc = html.escape(app_name)
        title_esc = html.escape(title)
        code_esc = html.escape(code)

        return f"""<!doctype html>
<html lang="es">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width,initial-scale=1" />
    <title>{title_esc}</title>
  </head>
  <body style="margin:0; padding:24px; background-color:#f4f4f5; font-family:Arial, Helvetica, sans-serif;">
    <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%">
      <tr>
        <td align="center">
          <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="480" style="width:480px; max-width:480px; background:#ffffff; border-radius:12px; padding:24px;">
            <tr>
              <td style="font-size:18px; font-weight:700; color:#111111;">{app_name_esc}</td>
            </tr>
            <tr>
              <td style="padding-top:12px; font-size:14px; color:#333333;">{title_esc}</td>
            </tr>
            <tr>
              <td style="padding:20px 0; font-size:32px; font-weight:800; letter-spacing:6px; color:#111111;">
                <strong>{code_esc}</strong>
              </td>
            </tr>
            <tr>
              <td style="font-size:12px; color:#777777;">
                Este código vence en {expires_in_minutes} minutos. Si vos no lo solicitaste, podés ignorar este email.
              </td>
            </tr>
          </table>
        </td>
      </tr>
    </table>
  </body>
</html>"""

    @staticmethod
    def send_email(
        settings: Settings,
        *,
        to_email: str,
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
    ) -> bool:
        if settings.email_backend == "disabled":
            logger.info("Envío de email deshabilitado; no se envía '%s' a %s", subject, to_email)
            return False
        if settings.email_backend != "smtp":
            logger.error("EMAIL_BACKEND desconocido: %s", settings.email_backend)
            return False
        from_header = EmailService._from_header(settings)
        if not settings.smtp_host or not from_header:
            logger.error("SMTP mal configurado (host/from). Email no enviado a %s", to_email)
            return False

        msg = EmailMessage()
        msg["From"] = from_header
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(text_body)
        if html_body:
            msg.add_alternative(html_body, subtype="html")

        try:
            if settings.smtp_use_ssl:
                context = ssl.create_default_context()
                with smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, context=context, timeout=10) as server:
                    if settings.smtp_username and settings.smtp_password:
                        server.login(settings.smtp_username, settings.smtp_password)
                    server.send_message(msg)
                    return True

            with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as server:
                server.ehlo()
                if settings.smtp_use_tls:
                    server.starttls(context=ssl.create_default_context())
                    server.ehlo()
                if settings.smtp_username and settings.smtp_password:
                    server.login(settings.smtp_username, settings.smtp_password)
                server.send_message(msg)
                return True
        except (smtplib.SMTPException, OSError):
            logger.exception("No se pudo enviar email a %s", to_email)
            return False

    @staticmethod
    def send_password_reset_code(settings: Settings, *, to_email: str, code: int) -> bool:
        expires = settings.password_reset_code_expire_minutes
        subject = f"{settings.app_name} - Código de recuperación"
        text_body = (
            f"Tu código de recuperación es: {code}\n\n"
            f"Vence en {expires} minutos.\n\n"
            "Si vos no solicitaste este cambio, podés ignorar este email."
        )
        html_body = EmailService._render_code_template(
            app_name=settings.app_name,
            title="Código de recuperación de contraseña",
            code=str(code),
            expires_in_minutes=expires,
        )
        return EmailService.send_email(
            settings,
            to_email=to_email,
            subject=subject,
            text_body=text_body,
            html_body=html_body,
        )


def dispatch_password_reset_code(settings: Settings, to_email: str, code: int) -> None:
    """
    Envío en segundo plano (BackgroundTasks): cualquier fallo se registra
    en el log y nunca llega al cliente.
    """
    try:
        sent = EmailService.send_password_reset_code(settings, to_email=to_email, code=code)
    except Exception:
        logger.exception("Error inesperado enviando código de recuperación a %s", to_email)
        return
    if not sent:
        logger.warning("Código de recuperación no enviado a %s", to_email)
