"""
Ledger entry model.

An entry is one accounting line: date, description, credit,
debit and price, plus a derived total. Entries are immutable;
every edit returns a new entry with total recomputed, so total
can never drift from the fields it is derived from:

    total = (debit - credit) * price

An entry is either pending (created locally, not yet known to
the gateway) or persisted (carries the gateway's id). The two
states are separate identity types rather than a sign
convention on one integer. entry.id still offers the signed
integer view: positive for persisted, negative for pending.
"""

import enum
import logging
import re
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from client_ledger.ledger.dates import is_display_date, today_display

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

AMOUNT_FIELDS = ("credit", "debit", "price")
EDITABLE_FIELDS = ("date", "description") + AMOUNT_FIELDS

# Scale of the stored amount columns
AMOUNT_PLACES = 4
AMOUNT_QUANTUM = Decimal(1).scaleb(-AMOUNT_PLACES)

# Leading numeric prefix, the same text a browser's parseFloat accepts
_NUMBER_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class PendingId:
    """Identity of an entry the gateway has not acknowledged yet."""
    local_id: int

    def __post_init__(self):
        if self.local_id <= 0:
            raise ValueError("local_id must be positive")

    @property
    def value(self) -> int:
        return -self.local_id


@dataclass(frozen=True)
class PersistedId:
    """Identity assigned by the gateway."""
    id: int

    def __post_init__(self):
        if self.id <= 0:
            raise ValueError("persisted id must be positive")

    @property
    def value(self) -> int:
        return self.id


EntryId = PendingId | PersistedId


class FieldOutcome(str, enum.Enum):
    """What happened to a single field edit."""
    APPLIED = "APPLIED"
    ROUNDED = "ROUNDED"
    CLAMPED = "CLAMPED"
    REJECTED = "REJECTED"


def compute_total(credit: Decimal, debit: Decimal, price: Decimal) -> Decimal:
    return (debit - credit) * price


@dataclass(frozen=True)
class LedgerEntry:
    key: EntryId
    date: str
    description: str = ""
    credit: Decimal = ZERO
    debit: Decimal = ZERO
    price: Decimal = ZERO
    total: Decimal = field(init=False)

    def __post_init__(self):
        object.__setattr__(
            self, "total", compute_total(self.credit, self.debit, self.price)
        )

    @property
    def id(self) -> int:
        return self.key.value

    @property
    def is_pending(self) -> bool:
        return isinstance(self.key, PendingId)


@dataclass(frozen=True)
class FieldUpdate:
    """Result of apply_field: the resulting entry and how the edit went."""
    entry: LedgerEntry
    outcome: FieldOutcome

    @property
    def accepted(self) -> bool:
        return self.outcome != FieldOutcome.REJECTED


def new_entry(local_id: int, today: date | None = None) -> LedgerEntry:
    """A blank pending entry dated today."""
    return LedgerEntry(key=PendingId(local_id), date=today_display(today))


def parse_amount(raw) -> Decimal:
    """
    Parse untyped input into a Decimal.

    Text is read up to the end of its leading number, so "12abc"
    is 12 and "abc" is 0. Anything unparseable is 0.
    """
    if raw is None or isinstance(raw, bool):
        return ZERO
    if isinstance(raw, (int, float, Decimal)):
        text = str(raw)
    else:
        match = _NUMBER_PREFIX.match(str(raw))
        if not match:
            return ZERO
        text = match.group(0).strip()

    try:
        value = Decimal(text)
    except InvalidOperation:
        return ZERO
    return value if value.is_finite() else ZERO


def apply_field(
    entry: LedgerEntry, field_name: str, raw_value, strict_dates: bool = False
) -> FieldUpdate:
    """
    Apply one edit from the presentation layer.

    A badly shaped date is rejected without touching the entry.
    Negative amounts are clamped to zero, and amounts finer than
    AMOUNT_PLACES are rounded half-up to it. id and total are not
    editable; asking for them raises ValueError.
    """
    if field_name not in EDITABLE_FIELDS:
        raise ValueError(f"Field '{field_name}' is not editable")

    if field_name == "date":
        if not is_display_date(raw_value, strict=strict_dates):
            logger.warning(
                "Ignoring date %r for entry %s: expected DD/MM/YYYY",
                raw_value, entry.id,
            )
            return FieldUpdate(entry, FieldOutcome.REJECTED)
        return FieldUpdate(replace(entry, date=raw_value), FieldOutcome.APPLIED)

    if field_name == "description":
        text = "" if raw_value is None else str(raw_value)
        return FieldUpdate(replace(entry, description=text), FieldOutcome.APPLIED)

    amount = parse_amount(raw_value)
    outcome = FieldOutcome.APPLIED
    if amount < 0:
        logger.debug(
            "Clamped negative %s %s to 0 for entry %s",
            field_name, amount, entry.id,
        )
        amount = ZERO
        outcome = FieldOutcome.CLAMPED
    elif amount.as_tuple().exponent < -AMOUNT_PLACES:
        try:
            rounded = amount.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            logger.warning(
                "Ignoring %s %r for entry %s: too many digits",
                field_name, raw_value, entry.id,
            )
            return FieldUpdate(entry, FieldOutcome.REJECTED)
        if rounded != amount:
            logger.debug(
                "Rounded %s %s to %s for entry %s",
                field_name, amount, rounded, entry.id,
            )
            outcome = FieldOutcome.ROUNDED
        amount = rounded

    return FieldUpdate(replace(entry, **{field_name: amount}), outcome)


def update_field(
    entry: LedgerEntry, field_name: str, raw_value, strict_dates: bool = False
) -> LedgerEntry:
    """Apply one edit and return the resulting entry."""
    return apply_field(entry, field_name, raw_value, strict_dates).entry
