"""
Email Service using Resend
Relays caller-composed messages and sends verification codes
"""

import logging
from datetime import datetime
from typing import Optional, Union

import resend
from resend.exceptions import ResendError

from .config import (
    EMAIL_FROM_ADDRESS,
    ENVIRONMENT,
    RESEND_API_KEY,
    VERIFICATION_CODE_TTL_MINUTES,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY

PROVIDER_ERROR_MESSAGES = {
    401: "Invalid API key",
    403: "Email sending is disabled",
    429: "Too many requests to the email provider",
}


class EmailServiceNotConfigured(Exception):
    pass


class EmailProviderError(Exception):
    """Resend rejected the message; carries the provider's HTTP status"""

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def provider_status(error: Exception) -> Optional[int]:
    """HTTP status carried by a Resend error, when it has one"""
    code = getattr(error, "code", None)
    try:
        return int(code) if code is not None else None
    except (TypeError, ValueError):
        return None


def send_email(
    to: Union[str, list[str]],
    subject: str,
    text: Optional[str] = None,
    html: Optional[str] = None,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        text: Plain text body
        html: HTML body
        from_address: Optional custom from address

    Returns:
        Send response dict

    Raises:
        EmailServiceNotConfigured: no API key outside development
        EmailProviderError: Resend refused the message
    """
    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    if not RESEND_API_KEY:
        if ENVIRONMENT == "development":
            logger.info(f"📭 DEVELOPMENT MODE: email to {recipients} not sent - subject: {subject}")
            return {"id": f"dev-{datetime.now().timestamp()}", "success": True}
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise EmailServiceNotConfigured("Email service not configured")

    email_data = {"from": sender, "to": recipients, "subject": subject}
    if text:
        email_data["text"] = text
    if html:
        email_data["html"] = html

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(email_data)
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except ResendError as e:
        logger.error(f"❌ Resend rejected email to {recipients}: {e}")
        raise EmailProviderError(provider_status(e), str(e)) from e


def verification_email_content(code: str) -> tuple[str, str, str]:
    """Subject, text and HTML bodies for a verification code email"""
    year = datetime.now().year
    subject = "Your Social-Plan Verification Code"
    text = (
        f"Your verification code is: {code}. "
        f"This code will expire in {VERIFICATION_CODE_TTL_MINUTES} minutes."
    )
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
      <h2 style="color: #4F46E5;">Social-Plan Verification</h2>
      <p>Thank you for signing up for Social-Plan! To complete your registration, please use the following code:</p>
      <div style="margin: 30px 0; padding: 10px; background-color: #F3F4F6; text-align: center; font-size: 24px; font-weight: bold; letter-spacing: 5px;">{code}</div>
      <p>This code will expire in {VERIFICATION_CODE_TTL_MINUTES} minutes.</p>
      <p>If you didn't request this code, you can safely ignore this email.</p>
      <p style="margin-top: 40px; font-size: 12px; color: #6B7280;">&copy; {year} Social-Plan. All rights reserved.</p>
    </div>
    """
    return subject, text, html


def send_verification_email(to: str, code: str) -> dict:
    """Send a verification code to a freshly registered address"""
    subject, text, html = verification_email_content(code)
    return send_email(to=to, subject=subject, text=text, html=html)
