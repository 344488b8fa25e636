"""Data models shared by the selector, materializer and store."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any


@dataclass(frozen=True)
class ReferenceCity:
    id: str
    name: str


@dataclass(frozen=True)
class ReferenceTownship:
    id: str
    name: str


@dataclass(frozen=True)
class Selection:
    city_id: str = ""
    township_id: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.city_id) and bool(self.township_id)


@dataclass(frozen=True)
class LocationPayload:
    """Denormalized city/township fields resolved at write time."""

    city_id: str
    city_name: str
    township_id: str
    township_name: str
    full_address: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "cityId": self.city_id,
            "cityName": self.city_name,
            "townshipId": self.township_id,
            "townshipName": self.township_name,
            "fullAddress": self.full_address,
        }


@dataclass(frozen=True)
class LocationRecord:
    id: str
    city_id: str
    city_name: str
    township_id: str
    township_name: str
    full_address: str
    created_at: str
    updated_at: str | None = None

    @classmethod
    def from_payload(cls, record_id: str, payload: LocationPayload, created_at: str) -> "LocationRecord":
        return cls(id=record_id, created_at=created_at, **asdict(payload))

    def replaced_by(self, payload: LocationPayload, updated_at: str) -> "LocationRecord":
        return replace(self, updated_at=updated_at, **asdict(payload))

    @property
    def label(self) -> str:
        return f"{self.city_name} - {self.township_name}"

    def to_dict(self) -> dict[str, Any]:
        out = {
            "id": self.id,
            "cityId": self.city_id,
            "cityName": self.city_name,
            "townshipId": self.township_id,
            "townshipName": self.township_name,
            "fullAddress": self.full_address,
            "createdAt": self.created_at,
        }
        if self.updated_at is not None:
            out["updatedAt"] = self.updated_at
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LocationRecord":
        return cls(
            id=data["id"],
            city_id=data["cityId"],
            city_name=data["cityName"],
            township_id=data["townshipId"],
            township_name=data["townshipName"],
            full_address=data["fullAddress"],
            created_at=data["createdAt"],
            updated_at=data.get("updatedAt"),
        )
