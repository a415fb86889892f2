"""
messaging.py
Outbound message dispatcher. Every message is logged first; SMS is then delivered
through the NetGSM HTTP GET API, email is handed to the operator's mail client.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from urllib.parse import quote

import httpx

import notifications
import store
from config import get_config
from errors import ConfigurationError, ConnectivityError, RemoteFailureError, StudyRoomError, ValidationError
from models import Channel, Direction, GatewaySettings, Message, Settings, Severity
from store import Collection
from utils import new_id, now_utc, to_iso

logger = logging.getLogger(__name__)

PHONE_DIGITS = 11
SUCCESS_CODE = "00"

GATEWAY_ERRORS = {
    "20": "Mesaj metni çok uzun veya karakter sorunu var.",
    "30": "Geçersiz kullanıcı adı, şifre veya API erişimi yok.",
    "40": "Mesaj başlığı (Header) sistemde tanımlı değil.",
    "50": "Abone hesabınızla İYS kontrollü gönderim yapılamaz.",
    "51": "Aboneliğe ait İYS Marka bilgisi bulunamadı.",
    "60": "JobID bulunamadı.",
    "70": "Hatalı sorgulama. Parametreler eksik veya hatalı.",
    "80": "Gönderim sınır aşımı.",
    "85": "Mükerrer gönderim sınırı aşıldı (1 dk içinde aynı numaraya çok fazla istek).",
}

MISSING_CREDENTIALS = "NetGSM ayarları eksik. Lütfen ayarlardan kullanıcı adı, şifre ve başlık giriniz."
INVALID_PHONE = "Geçersiz telefon numarası formatı."
CONNECTION_FAILED = "Sunucu bağlantı hatası. NetGSM API'sine ulaşılamadı."


def normalize_phone(phone: str) -> str:
    """Digits only, with a leading 0 (05xx...). Length is checked by the caller."""
    digits = re.sub(r"\D", "", phone or "")
    if not digits.startswith("0"):
        digits = "0" + digits
    return digits


def gateway_error_message(token: str) -> str:
    token = token.strip()
    return GATEWAY_ERRORS.get(token, f"NetGSM Hatası: {token}")


def send_sms(phone: str, text: str, gateway: GatewaySettings, client: httpx.Client | None = None) -> str:
    """
    Deliver one SMS. Returns the gateway job token on success.

    Raises ConfigurationError (no network call), ValidationError, RemoteFailureError
    or ConnectivityError.
    """
    if not gateway.is_configured:
        raise ConfigurationError(MISSING_CREDENTIALS)

    number = normalize_phone(phone)
    if len(number) != PHONE_DIGITS:
        raise ValidationError(INVALID_PHONE, field="recipient")

    config = get_config()
    params = {
        "user": gateway.username,
        "pass": gateway.password,
        "msgheader": gateway.header,
        "msg": text,
        "no": number,
    }
    try:
        if client is None:
            with httpx.Client(timeout=config.sms_timeout_seconds) as own_client:
                response = own_client.get(config.sms_gateway_url, params=params)
        else:
            response = client.get(config.sms_gateway_url, params=params)
        body = response.text
    except httpx.HTTPError as exc:
        logger.error("SMS gateway unreachable: %s", exc, extra={"channel": Channel.SMS.value})
        raise ConnectivityError(CONNECTION_FAILED) from exc

    if body.startswith(SUCCESS_CODE):
        return body.strip()
    raise RemoteFailureError(gateway_error_message(body), remote_code=body.strip())


def mailto_link(recipient: str, subject: str, body: str) -> str:
    return f"mailto:{recipient}?subject={quote(subject or '')}&body={quote(body or '')}"


def _log_outbound(recipient: str, subject: str | None, body: str, channel: Channel,
                  student_id: str | None, now: datetime) -> Message:
    message = Message(
        id=new_id(),
        recipient=recipient,
        body=body,
        channel=channel,
        direction=Direction.OUTBOUND,
        date=to_iso(now),
        is_read=True,
        subject=subject or None,
        student_id=student_id,
    )
    store.add(Collection.MESSAGES, message)
    return message


def send(
    recipient: str,
    subject: str | None,
    body: str,
    channel: Channel | str,
    settings: Settings,
    student_id: str | None = None,
    client: httpx.Client | None = None,
    now: datetime | None = None,
) -> bool:
    """
    Log an outbound message, then deliver it.

    The message record is written before delivery and stays as is when an SMS
    fails; the failure only shows up as an error notification. Email returns True
    once logged, the actual sending happens in the operator's mail client.
    """
    channel = Channel(channel)
    now = now or now_utc()

    if not (body or "").strip():
        notifications.append("Hata", "Mesaj içeriği boş olamaz.", Severity.ERROR, now=now)
        return False
    if not (recipient or "").strip():
        notifications.append("Hata", "Öğrencinin iletişim bilgisi eksik.", Severity.ERROR, now=now)
        return False

    _log_outbound(recipient, subject, body, channel, student_id, now)

    if channel == Channel.EMAIL:
        notifications.append(
            "E-Posta Hazırlandı",
            "E-posta programınız açıldı. Lütfen gönder butonuna basınız.",
            Severity.INFO,
            now=now,
        )
        return True

    try:
        job = send_sms(recipient, body, settings.netgsm, client=client)
    except StudyRoomError as exc:
        logger.warning("SMS not delivered: %s", exc.message, extra={"error_code": exc.code, "student_id": student_id})
        notifications.append("SMS Gönderim Hatası", exc.message, Severity.ERROR, now=now)
        return False

    logger.info("SMS delivered (%s)", job, extra={"student_id": student_id})
    notifications.append("SMS İletildi", "NetGSM üzerinden başarıyla gönderildi.", Severity.SUCCESS, now=now)
    return True


def inbox(messages: list[Message], direction: Direction | str, search: str = "") -> list[Message]:
    """Messages of one direction matching `search`, newest first."""
    direction = Direction(direction)
    term = search.strip().lower()
    found = [
        m for m in messages
        if m.direction == direction and (
            not term
            or term in m.recipient.lower()
            or term in (m.subject or "").lower()
            or term in m.body.lower()
        )
    ]
    return sorted(found, key=lambda m: m.date, reverse=True)
