"""Outbound dispatcher: message log, SMS gateway contract, error notifications."""

import httpx
import pytest

import messaging
import store
from errors import ConfigurationError, ConnectivityError, RemoteFailureError, ValidationError
from models import Channel, Direction, GatewaySettings, Message, Settings, Severity
from store import Collection

CONFIGURED = Settings(netgsm=GatewaySettings(username="demir", password="secret", header="DEMIRHOCA"))


class Gateway:
    """Records requests and answers with a fixed body or raises."""

    def __init__(self, body="00 123456789", error=None):
        self.body = body
        self.error = error
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(200, text=self.body)

    def client(self):
        return httpx.Client(transport=httpx.MockTransport(self))


def latest_notification():
    return store.load(Collection.NOTIFICATIONS)[0]


@pytest.mark.parametrize("raw,expected", [
    ("5551234567", "05551234567"),
    ("0555 123 45 67", "05551234567"),
    ("+90 (555) 123-4567", "0905551234567"),
    ("", "0"),
])
def test_normalize_phone(raw, expected):
    assert messaging.normalize_phone(raw) == expected


def test_sms_success_sends_expected_query(now):
    gateway = Gateway()

    ok = messaging.send("0555 123 45 67", None, "Ödeme hatırlatma & bilgi", Channel.SMS, CONFIGURED,
                        student_id="s1", client=gateway.client(), now=now)

    assert ok is True
    params = gateway.requests[0].url.params
    assert params["user"] == "demir"
    assert params["pass"] == "secret"
    assert params["msgheader"] == "DEMIRHOCA"
    assert params["msg"] == "Ödeme hatırlatma & bilgi"
    assert params["no"] == "05551234567"
    assert latest_notification().title == "SMS İletildi"


def test_sms_missing_credentials_makes_no_network_call(now):
    gateway = Gateway()

    ok = messaging.send("5551234567", None, "Merhaba", Channel.SMS, Settings(), client=gateway.client(), now=now)

    assert ok is False
    assert gateway.requests == []
    note = latest_notification()
    assert note.severity == Severity.ERROR
    assert note.message == messaging.MISSING_CREDENTIALS


def test_sms_invalid_phone_is_rejected_before_network(now):
    gateway = Gateway()
    ok = messaging.send("12345", None, "Merhaba", "sms", CONFIGURED, client=gateway.client(), now=now)
    assert ok is False
    assert gateway.requests == []
    assert latest_notification().message == "Geçersiz telefon numarası formatı."


def test_gateway_error_code_is_mapped_and_message_kept(now):
    gateway = Gateway(body="30")

    ok = messaging.send("5551234567", None, "Merhaba", Channel.SMS, CONFIGURED,
                        student_id="s1", client=gateway.client(), now=now)

    assert ok is False
    assert latest_notification().message == "Geçersiz kullanıcı adı, şifre veya API erişimi yok."
    messages = store.load(Collection.MESSAGES)
    assert len(messages) == 1
    assert messages[0].direction == Direction.OUTBOUND
    assert messages[0].body == "Merhaba"
    assert messages[0].student_id == "s1"


def test_unknown_gateway_code_falls_back_to_generic_message(now):
    gateway = Gateway(body="99")
    messaging.send("5551234567", None, "Merhaba", Channel.SMS, CONFIGURED, client=gateway.client(), now=now)
    assert latest_notification().message == "NetGSM Hatası: 99"


def test_network_failure_is_reported_as_connectivity(now):
    gateway = Gateway(error=httpx.ConnectError("unreachable"))
    ok = messaging.send("5551234567", None, "Merhaba", Channel.SMS, CONFIGURED, client=gateway.client(), now=now)
    assert ok is False
    assert latest_notification().message == messaging.CONNECTION_FAILED
    assert len(store.load(Collection.MESSAGES)) == 1


def test_send_sms_raises_typed_errors():
    with pytest.raises(ConfigurationError):
        messaging.send_sms("5551234567", "x", GatewaySettings())
    with pytest.raises(ValidationError):
        messaging.send_sms("1", "x", CONFIGURED.netgsm)
    with pytest.raises(RemoteFailureError) as exc:
        messaging.send_sms("5551234567", "x", CONFIGURED.netgsm, client=Gateway(body="85").client())
    assert exc.value.remote_code == "85"
    with pytest.raises(ConnectivityError):
        messaging.send_sms("5551234567", "x", CONFIGURED.netgsm,
                           client=Gateway(error=httpx.ReadTimeout("slow")).client())


def test_email_is_logged_only_and_returns_true(now):
    gateway = Gateway()

    ok = messaging.send("veli@example.com", "Bilgi", "Merhaba", Channel.EMAIL, Settings(),
                        client=gateway.client(), now=now)

    assert ok is True
    assert gateway.requests == []
    message = store.load(Collection.MESSAGES)[0]
    assert message.channel == Channel.EMAIL
    assert message.subject == "Bilgi"
    assert latest_notification().title == "E-Posta Hazırlandı"


def test_empty_body_is_rejected_without_logging(now):
    assert messaging.send("5551234567", None, "   ", Channel.SMS, CONFIGURED, now=now) is False
    assert store.load(Collection.MESSAGES) == []
    assert latest_notification().message == "Mesaj içeriği boş olamaz."


def test_mailto_link_encodes_subject_and_body():
    link = messaging.mailto_link("a@b.com", "Ödeme bilgisi", "Merhaba dünya")
    assert link.startswith("mailto:a@b.com?subject=")
    assert " " not in link


def test_inbox_filters_and_sorts_newest_first():
    msgs = [
        Message(id="1", recipient="Ali", body="eski", channel=Channel.SMS, direction=Direction.OUTBOUND, date="2026-01-01"),
        Message(id="2", recipient="Ayşe", body="yeni", channel=Channel.SMS, direction=Direction.OUTBOUND, date="2026-02-01"),
        Message(id="3", recipient="Ali", body="gelen", channel=Channel.EMAIL, direction=Direction.INBOUND, date="2026-03-01"),
    ]
    assert [m.id for m in messaging.inbox(msgs, Direction.OUTBOUND)] == ["2", "1"]
    assert [m.id for m in messaging.inbox(msgs, "outbound", "ali")] == ["1"]
    assert [m.id for m in messaging.inbox(msgs, Direction.INBOUND)] == ["3"]
