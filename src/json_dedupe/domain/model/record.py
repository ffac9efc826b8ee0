"""Lead record value object."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from json_dedupe.domain.dates import compare_instants, parse_recency

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

ID_FIELD: Final[str] = "_id"
EMAIL_FIELD: Final[str] = "email"
DEFAULT_RECENCY_FIELD: Final[str] = "entryDate"


@dataclass(frozen=True, slots=True, eq=False)
class LeadRecord:
    """One input record.

    ``record_id`` and ``email`` are the two uniqueness keys. ``entry_date`` is the
    raw recency value as it appeared in the source under ``recency_key``; it is
    parsed exactly once into ``parsed_recency`` (``None`` when unparseable).
    Every other source field lives in ``attributes`` in its original order.

    Records compare and hash by identity: two value-identical records in one
    batch are still two distinct records for the engine.
    """

    record_id: str
    email: str
    entry_date: str
    attributes: Mapping[str, object] = field(default_factory=dict[str, object])
    recency_key: str = DEFAULT_RECENCY_FIELD
    parsed_recency: datetime | None = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))
        object.__setattr__(self, "parsed_recency", parse_recency(self.entry_date))

    @property
    def has_valid_recency(self) -> bool:
        return self.parsed_recency is not None

    def compare_recency(self, other: LeadRecord) -> int:
        """Return -1/0/1; records with unparseable recency compare as equal to anything."""

        return compare_instants(self.parsed_recency, other.parsed_recency)

    def get(self, name: str) -> object | None:
        """Look up a value by its source field name."""

        if name == ID_FIELD:
            return self.record_id
        if name == EMAIL_FIELD:
            return self.email
        if name == self.recency_key:
            return self.entry_date
        return self.attributes.get(name)

    def field_names(self) -> tuple[str, ...]:
        return (ID_FIELD, EMAIL_FIELD, self.recency_key, *self.attributes)

    def to_payload(self) -> dict[str, object]:
        """Return the record in its source shape, ready for re-serialization."""

        payload: dict[str, object] = {
            ID_FIELD: self.record_id,
            EMAIL_FIELD: self.email,
            self.recency_key: self.entry_date,
        }
        payload.update(self.attributes)
        return payload

    def __str__(self) -> str:
        return (
            f"LeadRecord(_id: {self.record_id}, email: {self.email}, "
            f"{self.recency_key}: {self.entry_date})"
        )
