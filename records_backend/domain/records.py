"""Record entity and its request payloads."""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

# Columns a partial update may touch; SET clauses are built only from these.
UPDATABLE_FIELDS = ("title", "artist", "price")

# INTEGER column range shared by both engines
PRICE_MIN = -(2**31)
PRICE_MAX = 2**31 - 1


class Record(BaseModel):
    id: str
    title: str
    artist: str
    price: int

    @classmethod
    def from_row(cls, row) -> "Record":
        # sqlite3.Row and psycopg tuples both index positionally
        return cls(id=str(row[0]), title=row[1], artist=row[2], price=int(row[3]))


class PostRecordInput(BaseModel):
    title: str = Field(..., min_length=1)
    artist: str = Field(..., min_length=1)
    price: int = Field(..., strict=True, ge=PRICE_MIN, le=PRICE_MAX)

    @field_validator("price")
    @classmethod
    def _price_set(cls, v: int) -> int:
        if v == 0:
            raise ValueError("price is required")
        return v


class UpdateRecordInput(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    artist: Optional[str] = Field(None, min_length=1)
    price: Optional[int] = Field(None, strict=True, ge=PRICE_MIN, le=PRICE_MAX)

    def changes(self) -> Dict[str, Any]:
        """Fields the client actually sent, in column order.

        Keys sent as null count as absent, so ``{"price": 0}`` updates the
        price while ``{}`` and ``{"price": null}`` leave it alone.
        """
        sent = self.dict(exclude_unset=True)
        return {k: sent[k] for k in UPDATABLE_FIELDS if sent.get(k) is not None}
