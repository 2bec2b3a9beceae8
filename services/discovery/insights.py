"""Collection overview: document type breakdown and documents expiring soon."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel
from pytz import timezone

from services.discovery.Canonicalizer import CanonicalRegistry
from shared.models.document import Document

UNCATEGORIZED = "Uncategorized"
CRITICAL_DAYS = 15
WARNING_DAYS = 30


class Urgency(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    NORMAL = "normal"


class TypeCount(BaseModel):
    name: str
    total: int


class ExpiringDocument(BaseModel):
    document: Document
    expiry: date
    days_left: int
    urgency: Urgency


class CollectionInsights(BaseModel):
    type_counts: list[TypeCount]
    expiring_soon: list[ExpiringDocument]


def get_urgency(days_left: int) -> Urgency:
    if days_left < CRITICAL_DAYS:
        return Urgency.CRITICAL
    if days_left < WARNING_DAYS:
        return Urgency.WARNING
    return Urgency.NORMAL


def get_type_counts(documents: list[Document], type_registry: CanonicalRegistry | None = None) -> list[TypeCount]:
    """Count documents per document type, most frequent first.

    Types are grouped by their canonical label when a registry is given, so
    "Passport" and "Pasport" count as one. Ties keep first-seen order.
    """
    counts: dict[str, int] = {}
    for document in documents:
        if document.is_processing:
            continue
        name = document.type
        if name and type_registry is not None:
            name = type_registry.resolve(name) or name
        name = name or UNCATEGORIZED
        counts[name] = counts.get(name, 0) + 1
    return sorted(
        (TypeCount(name=name, total=total) for name, total in counts.items()),
        key=lambda entry: -entry.total,
    )


def get_expiring_soon(documents: list[Document], today: date, window_days: int = 90) -> list[ExpiringDocument]:
    """Documents expiring between today and today + window_days, soonest first.

    Already expired documents are not listed.
    """
    if window_days < 0:
        raise ValueError("window_days must not be negative, got %r" % window_days)
    expiring: list[ExpiringDocument] = []
    for document in documents:
        if document.expiry is None or document.is_processing:
            continue
        days_left = (document.expiry - today).days
        if 0 <= days_left <= window_days:
            expiring.append(
                ExpiringDocument(
                    document=document,
                    expiry=document.expiry,
                    days_left=days_left,
                    urgency=get_urgency(days_left),
                )
            )
    expiring.sort(key=lambda entry: entry.days_left)
    return expiring


def get_today(tz_name: str) -> date:
    """Current date in the configured timezone."""
    return datetime.now(timezone(tz_name)).date()


def build_insights(
    documents: list[Document],
    today: date,
    window_days: int = 90,
    type_registry: CanonicalRegistry | None = None,
) -> CollectionInsights:
    return CollectionInsights(
        type_counts=get_type_counts(documents, type_registry=type_registry),
        expiring_soon=get_expiring_soon(documents, today=today, window_days=window_days),
    )
