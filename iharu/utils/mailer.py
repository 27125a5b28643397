"""Outgoing mail for password reset codes (Resend HTTP API)."""

import html
import logging

import httpx

from iharu.config import settings

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"


def _reset_code_html(name: str, code: str) -> str:
    return (
        '<div style="font-family: sans-serif; max-width: 480px; margin: 0 auto; padding: 40px 20px;">'
        '<h1 style="color: #FF6B6B;">i-Haru</h1>'
        f"<p>안녕하세요, {html.escape(name)}님!</p>"
        "<p>비밀번호 재설정을 위한 인증 코드입니다:</p>"
        f'<p style="font-size: 32px; font-weight: bold; letter-spacing: 8px;">{code}</p>'
        f"<p>이 코드는 {settings.reset_token_expire_minutes}분 후에 만료됩니다.</p>"
        "</div>"
    )


def send_reset_code(email: str, name: str, code: str) -> bool:
    """Deliver a reset code. Without an API key the code is only logged.

    Returns True when the mail API accepted the message.
    """
    if not settings.resend_api_key:
        logger.info("Mail not configured; reset code for %s: %s", email, code)
        return False

    try:
        response = httpx.post(
            RESEND_URL,
            headers={"Authorization": f"Bearer {settings.resend_api_key}"},
            json={
                "from": settings.mail_from,
                "to": email,
                "subject": "[i-Haru] 비밀번호 재설정 코드",
                "html": _reset_code_html(name, code),
            },
            timeout=10.0,
        )
    except httpx.HTTPError as e:
        logger.error("Failed to send reset mail to %s: %s", email, e)
        return False

    if response.status_code >= 400:
        logger.error("Mail API rejected reset mail to %s: %s %s", email, response.status_code, response.text)
        return False
    return True
