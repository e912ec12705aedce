import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def build_reset_link(raw_token):
    return f"{settings.APP_BASE_URL}/reset-password?token={raw_token}"


def send_password_reset_email(user, raw_token):
    """Mail the reset link. Returns False instead of raising when delivery fails."""
    link = build_reset_link(raw_token)
    ttl = getattr(settings, 'PASSWORD_RESET_TOKEN_TTL_MINUTES', 30)
    subject = 'Reset your atelier password'
    body = (
        f"Hello {user.first_name or user.username},\n\n"
        f"A password reset was requested for your account. "
        f"Open the link below within {ttl} minutes to choose a new password:\n\n"
        f"{link}\n\n"
        f"If you did not ask for this, you can ignore this email."
    )
    try:
        send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [user.email], fail_silently=False)
    except Exception as e:
        logger.error(f"Failed to send password reset email to user {user.id}: {str(e)}", exc_info=True)
        return False
    logger.info(f"Password reset email sent to user {user.id}")
    return True
