"""Out-of-band notifications (invitation mail)"""
import httpx
from ..core.config import settings
from shared.constants import TIMEOUT_SHORT
import logging

logger = logging.getLogger(__name__)


async def send_invitation_email(email: str, full_name: str, temporary_password: str, role_display_name: str) -> bool:
    """Send invitation email via email service

    Returns whether the mail was handed to the email service. A failure is
    logged and never raised; the invitation itself stands either way.
    """
    login_link = f"{settings.FRONTEND_URL}{settings.LOGIN_PATH}"

    if not settings.email_delivery_enabled:
        logger.info(f"Email delivery disabled, invitation for {email} not mailed (login link: {login_link})")
        return False

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{settings.EMAIL_SERVICE_URL}/api/email/send",
                json={
                    "to": email,
                    "subject": "Your workforce portal account",
                    "body": (
                        f"Hello {full_name},\n\n"
                        f"An account with the role {role_display_name} has been created for you.\n"
                        f"Sign in at {login_link} with your email and the temporary password "
                        f"{temporary_password}. You will be asked to choose a new password."
                    ),
                },
                timeout=TIMEOUT_SHORT,
            )
            response.raise_for_status()
        logger.info(f"Invitation email sent to {email}")
        return True
    except httpx.HTTPError as e:
        logger.error(f"Error sending invitation email to {email}: {str(e)}")
        return False
