"""
Domain models for local and remote records.

Devotionals, favorites, payment records, Bible translations/verses and the user profile.
Plain dataclasses; each knows how to map to a SQLite row and, where it is mirrored,
to the JSON body the hosted backend expects. No ORM coupling.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from devotional_core.core.clock import parse_iso

FAVORITE_DEVOTIONAL = "devotional"
FAVORITE_VERSE_OF_MONTH = "verse_of_month"
FAVORITE_THEME_OF_MONTH = "theme_of_month"
FAVORITE_BIBLE_VERSE = "bible_verse"
FAVORITE_TYPES = frozenset(
    {FAVORITE_DEVOTIONAL, FAVORITE_VERSE_OF_MONTH, FAVORITE_THEME_OF_MONTH, FAVORITE_BIBLE_VERSE}
)

PAYMENT_SUCCESSFUL = "successful"
PAYMENT_FAILED = "failed"
PAYMENT_CANCELLED = "cancelled"
PAYMENT_PENDING = "pending"


@dataclass
class Devotional:
    """A dated short-form reading."""

    id: str
    title: str
    content: str
    date: datetime

    @classmethod
    def from_remote(cls, data: Mapping[str, Any]) -> "Devotional":
        """Backend rows carry numeric ids; locally ids are always strings."""
        return cls(
            id=str(data["id"]),
            title=data["title"],
            content=data["content"],
            date=parse_iso(data["date"]),
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Devotional":
        return cls(
            id=row["id"],
            title=row["title"],
            content=row["content"],
            date=parse_iso(row["date"]),
        )

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "date": self.date.isoformat(),
        }


@dataclass
class Favorite:
    """(user, type, reference_id) bookmark with a denormalized copy of what was bookmarked."""

    user_id: str
    type: str
    reference_id: str
    title: str
    content: str | None = None
    subtitle: str | None = None
    book_id: int | None = None
    chapter: int | None = None
    verse: int | None = None
    translation_id: str | None = None
    created_at: str | None = None
    """ISO timestamp; assigned by the store when the row is written."""
    id: int | None = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.user_id, self.type, self.reference_id)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Favorite":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            type=row["type"],
            reference_id=row["reference_id"],
            title=row["title"],
            content=row["content"],
            subtitle=row["subtitle"],
            book_id=row["book_id"],
            chapter=row["chapter"],
            verse=row["verse"],
            translation_id=row["translation_id"],
            created_at=row["created_at"],
        )

    @classmethod
    def from_remote(cls, data: Mapping[str, Any]) -> "Favorite":
        return cls(
            user_id=data["user_id"],
            type=data["type"],
            reference_id=str(data["reference_id"]),
            title=data["title"],
            content=data.get("content"),
            subtitle=data.get("subtitle"),
            book_id=data.get("book_id"),
            chapter=data.get("chapter"),
            verse=data.get("verse"),
            translation_id=data.get("translation_id"),
        )

    def to_remote(self, updated_at: str) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "type": self.type,
            "reference_id": self.reference_id,
            "title": self.title,
            "content": self.content,
            "subtitle": self.subtitle,
            "book_id": self.book_id,
            "chapter": self.chapter,
            "verse": self.verse,
            "translation_id": self.translation_id,
            "updated_at": updated_at,
        }


@dataclass
class PaymentRecord:
    """A checkout result; transaction_id is unique locally and remotely."""

    user_id: str
    user_email: str
    user_name: str
    transaction_id: str
    tx_ref: str
    amount: float
    currency: str
    plan_id: str
    plan_name: str
    plan_duration_months: int
    status: str
    created_at: datetime
    verified_at: datetime | None = None
    metadata: dict[str, Any] | None = None
    id: int | None = None

    @property
    def is_successful(self) -> bool:
        return self.status == PAYMENT_SUCCESSFUL

    def to_row(self) -> dict[str, Any]:
        """SQLite row; metadata stored as JSON text."""
        return {
            "user_id": self.user_id,
            "user_email": self.user_email,
            "user_name": self.user_name,
            "transaction_id": self.transaction_id,
            "tx_ref": self.tx_ref,
            "amount": self.amount,
            "currency": self.currency,
            "plan_id": self.plan_id,
            "plan_name": self.plan_name,
            "plan_duration_months": self.plan_duration_months,
            "status": self.status,
            "created_at": self.created_at.isoformat(),
            "verified_at": self.verified_at.isoformat() if self.verified_at else None,
            "metadata": json.dumps(self.metadata) if self.metadata is not None else None,
        }

    def to_remote(self) -> dict[str, Any]:
        """JSON body for the payments table; metadata stays an object (jsonb)."""
        row = self.to_row()
        row["metadata"] = self.metadata
        return row

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "PaymentRecord":
        raw_meta = row["metadata"]
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            user_email=row["user_email"],
            user_name=row["user_name"],
            transaction_id=row["transaction_id"],
            tx_ref=row["tx_ref"],
            amount=float(row["amount"]),
            currency=row["currency"],
            plan_id=row["plan_id"],
            plan_name=row["plan_name"],
            plan_duration_months=int(row["plan_duration_months"]),
            status=row["status"],
            created_at=parse_iso(row["created_at"]),
            verified_at=parse_iso(row["verified_at"]),
            metadata=json.loads(raw_meta) if raw_meta else None,
        )

    @classmethod
    def from_remote(cls, data: Mapping[str, Any]) -> "PaymentRecord":
        meta = data.get("metadata")
        if isinstance(meta, str):
            meta = json.loads(meta) if meta else None
        return cls(
            user_id=data["user_id"],
            user_email=data["user_email"],
            user_name=data["user_name"],
            transaction_id=data["transaction_id"],
            tx_ref=data["tx_ref"],
            amount=float(data["amount"]),
            currency=data["currency"],
            plan_id=data["plan_id"],
            plan_name=data["plan_name"],
            plan_duration_months=int(data["plan_duration_months"]),
            status=data["status"],
            created_at=parse_iso(data["created_at"]),
            verified_at=parse_iso(data.get("verified_at")),
            metadata=dict(meta) if meta else None,
        )


@dataclass
class BibleTranslation:
    """Catalog entry plus the reconciled "downloaded" flag."""

    id: str
    name: str
    abbreviation: str
    download_url: str
    size_mb: int
    description: str
    is_downloaded: bool = False

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "abbreviation": self.abbreviation,
            "download_url": self.download_url,
            "size_mb": self.size_mb,
            "description": self.description,
            "is_downloaded": 1 if self.is_downloaded else 0,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "BibleTranslation":
        return cls(
            id=row["id"],
            name=row["name"],
            abbreviation=row["abbreviation"],
            download_url=row["download_url"],
            size_mb=row["size_mb"],
            description=row["description"],
            is_downloaded=row["is_downloaded"] == 1,
        )


@dataclass(frozen=True)
class BibleBook:
    id: int
    name: str
    testament: str
    chapters: int


@dataclass
class BibleVerse:
    id: int
    book_id: int
    chapter: int
    verse: int
    text: str

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "book_id": self.book_id,
            "chapter": self.chapter,
            "verse": self.verse,
            "text": self.text,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "BibleVerse":
        return cls(
            id=row["id"],
            book_id=row["book_id"],
            chapter=row["chapter"],
            verse=row["verse"],
            text=row["text"],
        )


@dataclass
class UserProfile:
    """Locally cached identity; the users table remains the source of truth."""

    user_id: str
    email: str = ""
    name: str = ""
    photo_url: str = ""

    def as_dict(self) -> dict[str, str]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "name": self.name,
            "photo_url": self.photo_url,
        }
