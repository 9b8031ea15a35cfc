"""
Core Data Models for InvestTrack

These models define the schemas for everything the tracker stores:
customers, the investments made with them, the payments recorded
against those investments, and the two settings objects.

DESIGN DECISION: The JSON form uses camelCase keys and plain numbers,
the same shape the browser version of the tracker wrote to storage and to
backup files, so existing backups import unchanged. In memory, money is
always a Decimal so that totals and expected returns are exact.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Generate a fresh record identifier."""
    return str(uuid4())


def decimal_to_number(value: Decimal) -> Union[int, float, str]:
    if value == value.to_integral_value():
        return int(value)
    number = float(value)
    if Decimal(repr(number)) == value:
        return number
    # More digits than a float holds: written as a string to keep them all
    return str(value)


def _truncate_iso_timestamp(value: Any) -> Any:
    # Older records carry full ISO timestamps where a date is expected
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10 and value[10] in ("T", " "):
        return value[:10]
    return value


Money = Annotated[
    Decimal,
    PlainSerializer(decimal_to_number, when_used="json"),
]

IsoDate = Annotated[date, BeforeValidator(_truncate_iso_timestamp)]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class InvestmentStatus(str, Enum):
    """Lifecycle status of an investment."""
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentType(str, Enum):
    """
    Kind of cash movement recorded against an investment.

    LEND is the only outgoing type: money given to the customer.
    Everything else is money received back.
    """
    INSTALLMENT = "installment"
    DOWN_PAYMENT = "downpayment"
    FINAL_SETTLEMENT = "final_settlement"
    LEND = "lend"

    @property
    def label(self) -> str:
        if self is PaymentType.LEND:
            return "Money Given"
        return self.value.replace("_", " ").title()

    @classmethod
    def received(cls) -> list["PaymentType"]:
        """Types a repayment can be recorded as (everything but LEND)."""
        return [t for t in cls if t is not cls.LEND]


class PaymentDirection(str, Enum):
    """Direction of a payment as seen from the tracker's owner."""
    IN = "IN"
    OUT = "OUT"


class LockType(str, Enum):
    """
    Unlock method for the app lock.

    Only PIN is functional; the others are stored but behave like PIN.
    """
    PIN = "pin"
    PATTERN = "pattern"
    BIOMETRIC = "biometric"

    @property
    def label(self) -> str:
        return "PIN" if self is LockType.PIN else self.value.title()


class BackupFrequency(str, Enum):
    """How often the user intends to back up."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


AUTO_LOCK_CHOICES = (0, 1, 5, 15, 30)


# =============================================================================
# RECORDS
# =============================================================================

class TrackerModel(BaseModel):
    """Base model: camelCase JSON keys, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class Customer(TrackerModel):
    """A person the owner invests with."""

    id: str = Field(default_factory=new_id, min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(default="", max_length=200)
    phone: str = Field(default="", max_length=50)
    joined_date: IsoDate = Field(default_factory=date.today)
    profile_image: Optional[str] = Field(
        default=None,
        description="Opaque data URL of the profile picture"
    )


class Investment(TrackerModel):
    """
    Capital placed with a customer.

    amount_invested is the principal. It grows when more funds are
    given; the matching LEND payment records the disbursement.
    """

    id: str = Field(default_factory=new_id, min_length=1)
    customer_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=200)
    amount_invested: Money = Field(..., ge=0)
    expected_return_rate: Money = Field(
        default=Decimal("0"),
        description="Expected return as a percentage of principal"
    )
    start_date: IsoDate = Field(default_factory=date.today)
    end_date: IsoDate = Field(default_factory=date.today)
    status: InvestmentStatus = InvestmentStatus.ACTIVE
    notes: Optional[str] = Field(default=None, max_length=2000)

    @property
    def expected_total(self) -> Decimal:
        """Principal plus the expected return."""
        return self.amount_invested * (1 + self.expected_return_rate / 100)


class Payment(TrackerModel):
    """A cash movement recorded against an investment."""

    id: str = Field(default_factory=new_id, min_length=1)
    investment_id: str = Field(..., min_length=1)
    amount: Money = Field(..., ge=0)
    date: IsoDate = Field(default_factory=date.today)
    type: PaymentType = PaymentType.INSTALLMENT
    notes: Optional[str] = Field(default=None, max_length=2000)
    receipt_image: Optional[str] = Field(
        default=None,
        description="Opaque data URL of the receipt"
    )

    @property
    def is_outgoing(self) -> bool:
        return self.type is PaymentType.LEND

    @property
    def direction(self) -> PaymentDirection:
        return PaymentDirection.OUT if self.is_outgoing else PaymentDirection.IN


# =============================================================================
# SETTINGS
# =============================================================================

class SecuritySettings(TrackerModel):
    """
    App lock configuration.

    NOTE: the PIN is stored in plaintext. The lock only gates the UI,
    it does not encrypt anything.
    """

    enabled: bool = False
    pin: str = ""
    lock_type: LockType = LockType.PIN
    auto_lock_minutes: int = Field(
        default=0,
        ge=0,
        description="Idle minutes before locking; 0 disables the idle lock"
    )


class BackupSettings(TrackerModel):
    """Manual backup preferences. Nothing schedules backups."""

    enabled: bool = True
    frequency: BackupFrequency = BackupFrequency.WEEKLY
    last_backup_date: Optional[datetime] = None


# =============================================================================
# APPLICATION STATE
# =============================================================================

class AppState(TrackerModel):
    """
    The full dataset of one user.

    This is exactly what gets persisted and what a backup file contains.
    """

    customers: list[Customer] = Field(default_factory=list)
    investments: list[Investment] = Field(default_factory=list)
    payments: list[Payment] = Field(default_factory=list)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    backup: BackupSettings = Field(default_factory=BackupSettings)

    @field_validator("security", "backup", mode="before")
    @classmethod
    def default_missing_settings(cls, v: Any, info) -> Any:
        """Records written before settings existed carry null here."""
        if v is None:
            return SecuritySettings() if info.field_name == "security" else BackupSettings()
        return v

    def to_json(self, indent: Optional[int] = None) -> str:
        """Serialize to the persisted JSON shape."""
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "AppState":
        """Parse the persisted JSON shape. Raises pydantic.ValidationError."""
        return cls.model_validate_json(text)

    def get_customer(self, customer_id: Optional[str]) -> Optional[Customer]:
        return next((c for c in self.customers if c.id == customer_id), None)

    def get_investment(self, investment_id: Optional[str]) -> Optional[Investment]:
        return next((i for i in self.investments if i.id == investment_id), None)

    def get_payment(self, payment_id: Optional[str]) -> Optional[Payment]:
        return next((p for p in self.payments if p.id == payment_id), None)

    def investments_for(self, customer_id: str) -> list[Investment]:
        return [i for i in self.investments if i.customer_id == customer_id]

    def payments_for(self, investment_id: str) -> list[Payment]:
        return [p for p in self.payments if p.investment_id == investment_id]


# =============================================================================
# AI INSIGHTS
# =============================================================================

class AIAnalysisResult(BaseModel):
    """Display-ready result of one portfolio analysis."""

    summary: str
    risk_assessment: str
    opportunities: str
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
