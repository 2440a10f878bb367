import logging
from typing import Optional
from twilio.rest import Client
from app.config.database import settings

logger = logging.getLogger("twilio")


class TwilioService:
    def __init__(self, account_sid: str, auth_token: str, phone_number: str):
        self.phone_number = phone_number
        self.client = Client(account_sid, auth_token)

    def send_sms(self, to_number: str, message: str) -> bool:
        try:
            sent = self.client.messages.create(
                body=message,
                from_=self.phone_number,
                to=to_number
            )
            logger.info(f"SMS sent: {sent.sid}")
            return True
        except Exception as e:
            logger.error(f"SMS send error to {to_number}: {e}")
            return False

    def send_notification_sms(self, to_number: str, title: str, message: str) -> bool:
        body = f"""{title}

{message}

- {settings.clinic_name}"""

        return self.send_sms(to_number, body)


_twilio_service: Optional[TwilioService] = None


def get_twilio_service() -> Optional[TwilioService]:
    """Shared SMS sender, or None when SMS delivery is disabled or unconfigured"""
    global _twilio_service
    if not settings.enable_sms_notifications:
        return None
    if not (settings.twilio_account_sid and settings.twilio_auth_token and settings.twilio_phone_number):
        logger.warning("SMS notifications enabled but Twilio credentials are missing")
        return None
    if _twilio_service is None:
        _twilio_service = TwilioService(
            settings.twilio_account_sid,
            settings.twilio_auth_token,
            settings.twilio_phone_number
        )
    return _twilio_service
