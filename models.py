"""
models.py
Domain records, enums and defaults. JSON field names follow the stored wire format (camelCase).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from errors import SchemaError

DESK_COUNT = 35
NOTIFICATION_CAP = 50
PAYMENT_CYCLE_DAYS = 30


class SubscriptionType(str, Enum):
    MONTHLY = "Aylık"
    YEARLY = "Yıllık"
    TRIAL = "Deneme"


class PaymentStatus(str, Enum):
    PAID = "Ödendi"
    PENDING = "Ödeme Bekliyor"
    OVERDUE = "Gecikmiş"


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionCategory(str, Enum):
    MONTHLY_SUBSCRIPTION = "Aylık Abonelik"
    YEARLY_SUBSCRIPTION = "Yıllık Abonelik"
    COACHING = "Koçluk"
    OTHER_INCOME = "Diğer Gelir"
    RENT = "Kira"
    BILLS = "Fatura"
    STAFF = "Personel"
    OTHER_EXPENSE = "Diğer Gider"


INCOME_CATEGORIES = (
    TransactionCategory.MONTHLY_SUBSCRIPTION,
    TransactionCategory.YEARLY_SUBSCRIPTION,
    TransactionCategory.COACHING,
    TransactionCategory.OTHER_INCOME,
)
EXPENSE_CATEGORIES = (
    TransactionCategory.RENT,
    TransactionCategory.BILLS,
    TransactionCategory.STAFF,
    TransactionCategory.OTHER_EXPENSE,
)


class Channel(str, Enum):
    EMAIL = "email"
    SMS = "sms"


class Direction(str, Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class Severity(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"


def _enum(cls, value, name: str):
    try:
        return cls(value)
    except ValueError:
        raise SchemaError(f"Geçersiz {name} değeri: {value!r}") from None


def _require(d: dict[str, Any], key: str) -> Any:
    if not isinstance(d, dict):
        raise SchemaError("Kayıt bir nesne olmalıdır.")
    if key not in d or d[key] is None:
        raise SchemaError(f"Eksik alan: {key}")
    return d[key]


def _optional_str(value) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _desk(value) -> int | None:
    if value is None or value == "":
        return None
    try:
        desk = int(value)
    except (TypeError, ValueError):
        raise SchemaError(f"Geçersiz masa numarası: {value!r}") from None
    if not 1 <= desk <= DESK_COUNT:
        raise SchemaError(f"Masa numarası 1 ile {DESK_COUNT} arasında olmalıdır: {desk}")
    return desk


@dataclass(frozen=True)
class Student:
    id: str
    full_name: str
    parent_name: str
    student_phone: str
    parent_phone: str
    dob: str
    registration_date: str
    subscription_type: SubscriptionType
    payment_status: PaymentStatus
    desk_number: int | None = None
    email: str | None = None
    last_payment_date: str | None = None
    next_payment_date: str | None = None
    notes: str | None = None

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Student":
        return Student(
            id=str(_require(d, "id")),
            full_name=str(d.get("fullName") or ""),
            parent_name=str(d.get("parentName") or ""),
            student_phone=str(d.get("studentPhone") or ""),
            parent_phone=str(d.get("parentPhone") or ""),
            dob=str(d.get("dob") or ""),
            registration_date=str(d.get("registrationDate") or ""),
            subscription_type=_enum(SubscriptionType, d.get("subscriptionType", SubscriptionType.MONTHLY.value), "abonelik"),
            payment_status=_enum(PaymentStatus, d.get("paymentStatus", PaymentStatus.PENDING.value), "ödeme durumu"),
            desk_number=_desk(d.get("deskNumber")),
            email=_optional_str(d.get("email")),
            last_payment_date=_optional_str(d.get("lastPaymentDate")),
            next_payment_date=_optional_str(d.get("nextPaymentDate")),
            notes=_optional_str(d.get("notes")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "fullName": self.full_name,
            "parentName": self.parent_name,
            "studentPhone": self.student_phone,
            "parentPhone": self.parent_phone,
            "dob": self.dob,
            "registrationDate": self.registration_date,
            "subscriptionType": self.subscription_type.value,
            "paymentStatus": self.payment_status.value,
            "deskNumber": self.desk_number,
        }
        # Optional fields are omitted rather than written as null.
        for key, value in (
            ("email", self.email),
            ("lastPaymentDate", self.last_payment_date),
            ("nextPaymentDate", self.next_payment_date),
            ("notes", self.notes),
        ):
            if value is not None:
                d[key] = value
        return d


@dataclass(frozen=True)
class Transaction:
    id: str
    date: str
    amount: float
    type: TransactionType
    category: TransactionCategory
    description: str
    student_id: str | None = None

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Transaction":
        try:
            amount = float(_require(d, "amount"))
        except (TypeError, ValueError):
            raise SchemaError(f"Geçersiz tutar: {d.get('amount')!r}") from None
        return Transaction(
            id=str(_require(d, "id")),
            date=str(_require(d, "date")),
            amount=amount,
            type=_enum(TransactionType, _require(d, "type"), "işlem türü"),
            category=_enum(TransactionCategory, _require(d, "category"), "kategori"),
            description=str(d.get("description") or ""),
            student_id=_optional_str(d.get("studentId")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "date": self.date,
            "amount": self.amount,
            "type": self.type.value,
            "category": self.category.value,
            "description": self.description,
        }
        if self.student_id is not None:
            d["studentId"] = self.student_id
        return d


@dataclass(frozen=True)
class Message:
    id: str
    recipient: str
    body: str
    channel: Channel
    direction: Direction
    date: str
    is_read: bool = False
    subject: str | None = None
    student_id: str | None = None

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Message":
        return Message(
            id=str(_require(d, "id")),
            recipient=str(d.get("recipient") or ""),
            body=str(d.get("body") or ""),
            channel=_enum(Channel, _require(d, "type"), "kanal"),
            direction=_enum(Direction, _require(d, "direction"), "yön"),
            date=str(d.get("date") or ""),
            is_read=bool(d.get("isRead", False)),
            subject=_optional_str(d.get("subject")),
            student_id=_optional_str(d.get("studentId")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "recipient": self.recipient,
            "body": self.body,
            "type": self.channel.value,
            "direction": self.direction.value,
            "date": self.date,
            "isRead": self.is_read,
        }
        if self.subject is not None:
            d["subject"] = self.subject
        if self.student_id is not None:
            d["studentId"] = self.student_id
        return d


@dataclass(frozen=True)
class Notification:
    id: str
    title: str
    message: str
    severity: Severity
    date: str
    is_read: bool = False

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Notification":
        return Notification(
            id=str(_require(d, "id")),
            title=str(d.get("title") or ""),
            message=str(d.get("message") or ""),
            severity=_enum(Severity, d.get("type", Severity.INFO.value), "bildirim türü"),
            date=str(d.get("date") or ""),
            is_read=bool(d.get("isRead", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "type": self.severity.value,
            "date": self.date,
            "isRead": self.is_read,
        }


# ---------- Settings singleton ----------

def _sub(d: dict[str, Any], key: str) -> dict[str, Any]:
    value = d.get(key) if isinstance(d, dict) else None
    return value if isinstance(value, dict) else {}


def _price(value, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class GatewaySettings:
    api_key: str = ""
    username: str = ""
    password: str = ""
    header: str = "DEMIRHOCA"

    @property
    def is_configured(self) -> bool:
        return bool(self.username and self.password and self.header)


@dataclass(frozen=True)
class MailSettings:
    email: str = ""
    app_password: str = ""


@dataclass(frozen=True)
class SecuritySettings:
    admin_pin: str = "1234"


@dataclass(frozen=True)
class Pricing:
    monthly_price: float = 1500.0
    yearly_price: float = 15000.0
    trial_price: float = 0.0


@dataclass(frozen=True)
class Settings:
    netgsm: GatewaySettings = field(default_factory=GatewaySettings)
    smtp: MailSettings = field(default_factory=MailSettings)
    security: SecuritySettings = field(default_factory=SecuritySettings)
    pricing: Pricing = field(default_factory=Pricing)

    @staticmethod
    def from_dict(d: dict[str, Any] | None) -> "Settings":
        """Every missing sub-object or key falls back to its default."""
        d = d if isinstance(d, dict) else {}
        gw, mail, sec, pr = _sub(d, "netgsm"), _sub(d, "smtp"), _sub(d, "security"), _sub(d, "pricing")
        defaults = Pricing()
        return Settings(
            netgsm=GatewaySettings(
                api_key=str(gw.get("apiKey", "")),
                username=str(gw.get("username", "")),
                password=str(gw.get("password", "")),
                header=str(gw.get("header", GatewaySettings.header)),
            ),
            smtp=MailSettings(
                email=str(mail.get("email", "")),
                app_password=str(mail.get("appPassword", "")),
            ),
            security=SecuritySettings(admin_pin=str(sec.get("adminPin", SecuritySettings.admin_pin))),
            pricing=Pricing(
                monthly_price=_price(pr.get("monthlyPrice"), defaults.monthly_price),
                yearly_price=_price(pr.get("yearlyPrice"), defaults.yearly_price),
                trial_price=_price(pr.get("trialPrice"), defaults.trial_price),
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "netgsm": {
                "apiKey": self.netgsm.api_key,
                "username": self.netgsm.username,
                "password": self.netgsm.password,
                "header": self.netgsm.header,
            },
            "smtp": {"email": self.smtp.email, "appPassword": self.smtp.app_password},
            "security": {"adminPin": self.security.admin_pin},
            "pricing": {
                "monthlyPrice": self.pricing.monthly_price,
                "yearlyPrice": self.pricing.yearly_price,
                "trialPrice": self.pricing.trial_price,
            },
        }

    def with_pricing(self, **changes) -> "Settings":
        return replace(self, pricing=replace(self.pricing, **changes))
