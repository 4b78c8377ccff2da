"""
SMS transport used to tell the next of kin about a delivery.

The backend is chosen with the ``SMS_BACKEND`` setting, the same way
Django picks an e-mail backend:

* ``ConsoleSmsBackend`` only logs the message (development default).
* ``LocmemSmsBackend`` appends to the module level :data:`outbox`
  (tests).
* ``HttpSmsBackend`` posts the message to an HTTP gateway.

Sending is synchronous; a failure raises :class:`NotificationError` and
is never retried here.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime

import requests
from django.conf import settings
from django.utils import timezone
from django.utils.module_loading import import_string

from ward.exceptions import NotificationError

logger = logging.getLogger(__name__)


@dataclass
class SmsMessage:
    phone: str
    text: str
    sent_at: datetime = field(default_factory=timezone.now)


outbox: list[SmsMessage] = []


class BaseSmsBackend:
    def send(self, phone: str, text: str) -> SmsMessage:
        raise NotImplementedError


class ConsoleSmsBackend(BaseSmsBackend):
    def send(self, phone: str, text: str) -> SmsMessage:
        logger.info('SMS to %s: %s', phone, text)
        return SmsMessage(phone=phone, text=text)


class LocmemSmsBackend(BaseSmsBackend):
    def send(self, phone: str, text: str) -> SmsMessage:
        msg = SmsMessage(phone=phone, text=text)
        outbox.append(msg)
        return msg


class HttpSmsBackend(BaseSmsBackend):
    """Post ``{"to", "from", "message"}`` as JSON to ``SMS_GATEWAY_URL``."""

    def send(self, phone: str, text: str) -> SmsMessage:
        if not settings.SMS_GATEWAY_URL:
            raise NotificationError('SMS gateway is not configured')
        headers = {}
        if settings.SMS_GATEWAY_TOKEN:
            headers['Authorization'] = f'Bearer {settings.SMS_GATEWAY_TOKEN}'
        payload = {'to': phone, 'from': settings.SMS_SENDER_ID, 'message': text}
        try:
            r = requests.post(settings.SMS_GATEWAY_URL, json=payload, headers=headers, timeout=settings.SMS_TIMEOUT)
            r.raise_for_status()
        except requests.RequestException as e:
            logger.warning('SMS gateway rejected message to %s: %s', phone, e)
            raise NotificationError(f'SMS gateway error: {e}') from e
        logger.info('SMS to %s accepted by gateway (%s)', phone, r.status_code)
        return SmsMessage(phone=phone, text=text)


def get_backend() -> BaseSmsBackend:
    return import_string(settings.SMS_BACKEND)()


def send_sms(phone: str, text: str) -> SmsMessage:
    if not phone:
        raise NotificationError('next of kin has no phone number')
    return get_backend().send(phone, text)
