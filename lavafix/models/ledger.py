"""
Core Ledger Models for LavaFix

These models define the strict schemas for the three ledger collections
and the structures used to change them.
They are designed to:
1. Enforce type safety at runtime
2. Round-trip through any persistence gateway as plain dicts
3. Stay readable by the earlier browser app (camelCase keys on disk)

DESIGN DECISION: Python code uses snake_case attributes, persisted
records use camelCase aliases. Always dump with by_alias=True.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import uuid4

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Generate an opaque entity id."""
    return uuid4().hex


def to_local_naive(value: datetime) -> datetime:
    """
    Normalize a timestamp to naive local time.

    Records written by the browser app carry UTC ISO strings (or epoch
    milliseconds); records written here are naive local. Calendar
    filters work on local dates, so everything is compared in local time.
    """
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


LocalDatetime = Annotated[datetime, AfterValidator(to_local_naive)]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ClientStatus(str, Enum):
    """
    Billing-cycle state of a client.

    CRITICAL: These are the only two states. There is no terminal state,
    the cycle repeats every month.
    """
    PENDIENTE = "Pendiente"  # Owes this cycle
    PAGADO = "Pagado"        # Paid this cycle


# =============================================================================
# LEDGER ENTITIES
# =============================================================================

class LedgerModel(BaseModel):
    """Shared configuration for every persisted ledger entity."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_record(self) -> dict:
        """Convert to the plain dict handed to a persistence gateway."""
        return self.model_dump(mode="json", by_alias=True)


class Client(LedgerModel):
    """
    A recurring-service subscriber billed monthly.

    created_at doubles as the insertion-order key for the default sort.
    """

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique client ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Client name"
    )
    phone1: str = Field(
        ...,
        min_length=1,
        description="Primary phone (required)"
    )
    phone2: Optional[str] = Field(
        default=None,
        description="Secondary phone"
    )
    monthly_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Monthly fee"
    )
    status: ClientStatus = Field(
        default=ClientStatus.PENDIENTE,
        description="Current billing-cycle state"
    )
    created_at: LocalDatetime = Field(
        default_factory=datetime.now,
        description="When the client was added"
    )
    last_payment_date: Optional[LocalDatetime] = Field(
        default=None,
        description="When the last payment was recorded"
    )
    image: Optional[str] = Field(
        default=None,
        description="Encoded avatar (data URL)"
    )

    @property
    def is_pending(self) -> bool:
        return self.status == ClientStatus.PENDIENTE


class PaymentRecord(LedgerModel):
    """
    Money received from a client.

    client_name is a snapshot taken when the payment was recorded.
    Renaming the client later does NOT change it.
    """

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique payment ID"
    )
    client_id: str = Field(
        ...,
        description="ID of the paying client"
    )
    client_name: str = Field(
        ...,
        description="Client name at the time of payment"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount received"
    )
    date: LocalDatetime = Field(
        default_factory=datetime.now,
        description="When the payment was received"
    )
    notes: Optional[str] = Field(
        default=None,
        description="Free-text notes"
    )


# =============================================================================
# INPUT MODELS - what callers are allowed to send
# =============================================================================

class ClientDraft(BaseModel):
    """
    Data entered in the "new client" form.

    Everything is optional here on purpose: a draft without a name or
    primary phone is skipped by the store rather than rejected.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    phone1: str = ""
    phone2: Optional[str] = None
    monthly_amount: Optional[Decimal] = Field(default=None, ge=0)
    image: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.name) and bool(self.phone1)


class ClientPatch(BaseModel):
    """
    Partial update of a client's profile.

    Only fields explicitly set on the patch are applied. status and
    last_payment_date are owned by the state machine and are not patchable.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = None
    phone1: Optional[str] = None
    phone2: Optional[str] = None
    monthly_amount: Optional[Decimal] = Field(default=None, ge=0)
    image: Optional[str] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class PaymentPatch(BaseModel):
    """Direct edit of a payment history entry."""

    amount: Optional[Decimal] = Field(default=None, ge=0)
    date: Optional[LocalDatetime] = None
    notes: Optional[str] = Field(default=None, max_length=1000)

    def changes(self) -> dict:
        changes = self.model_dump(exclude_unset=True)
        # amount and date are required on the record itself
        return {
            key: value for key, value in changes.items()
            if value is not None or key == "notes"
        }


# =============================================================================
# PREVIEWS - what a destructive action would do, before it is committed
# =============================================================================

class ClientDeletionPreview(BaseModel):
    """Everything a client delete would remove."""

    client: Client
    payments: list[PaymentRecord] = Field(default_factory=list)

    @property
    def payment_count(self) -> int:
        return len(self.payments)


class UndoPreview(BaseModel):
    """The status correction an undo would perform."""

    client: Client
    payment_to_remove: Optional[PaymentRecord] = None

    @property
    def removes_payment(self) -> bool:
        return self.payment_to_remove is not None


class MonthResetPreview(BaseModel):
    """Clients touched by a month reset."""

    clients: list[Client] = Field(default_factory=list)
    paid_clients: list[Client] = Field(
        default_factory=list,
        description="Clients that will go from Pagado back to Pendiente"
    )

    @property
    def total_count(self) -> int:
        return len(self.clients)

    @property
    def changed_count(self) -> int:
        return len(self.paid_clients)
