"""Pydantic schemas for the NS API payloads.

Only the fields the application reads are declared; everything else
in the upstream responses is ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ...domain.models import PriceQuote, StationRecord, TravelClass, Trip

NS_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ===================== Stations =====================


class StationIdPayload(_Payload):
    uic_code: str


class StationNamesPayload(_Payload):
    long: str
    medium: Optional[str] = None
    short: Optional[str] = None


class StationPayload(_Payload):
    id: StationIdPayload
    names: StationNamesPayload
    synonyms: List[str] = Field(default_factory=list)

    def to_record(self) -> StationRecord:
        alternates = {self.names.medium, self.names.short, *self.synonyms}
        aliases = frozenset(a for a in alternates if a and a != self.names.long)
        return StationRecord(
            name=self.names.long,
            uic_code=int(self.id.uic_code),
            aliases=aliases,
        )


class StationsResponse(_Payload):
    payload: List[StationPayload]


# ===================== Trips =====================


class StopPayload(_Payload):
    name: str
    actual_track: Optional[str] = None
    planned_track: Optional[str] = None
    planned_date_time: datetime
    actual_date_time: Optional[datetime] = None

    @field_validator("planned_date_time", "actual_date_time", mode="before")
    @classmethod
    def _parse_ns_datetime(cls, value: object) -> object:
        # The API sends offsets without a colon (+0100)
        if isinstance(value, str):
            return datetime.strptime(value, NS_DATETIME_FORMAT)
        return value


class ProductPayload(_Payload):
    category_code: str


class LegPayload(_Payload):
    origin: StopPayload
    destination: StopPayload
    cancelled: bool = False
    product: ProductPayload


class TripPayload(_Payload):
    legs: List[LegPayload]

    def to_trip(self) -> Optional[Trip]:
        """Convert the first leg into a Trip (None for a trip without legs)."""
        if not self.legs:
            return None

        leg = self.legs[0]
        return Trip(
            origin_name=leg.origin.name,
            destination_name=leg.destination.name,
            track=leg.origin.actual_track or leg.origin.planned_track or "?",
            cancelled=leg.cancelled,
            departure_time=leg.origin.planned_date_time,
            arrival_time=leg.destination.planned_date_time,
            train_type=leg.product.category_code,
        )


class TripsResponse(_Payload):
    trips: List[TripPayload]


# ===================== Prices =====================


class PricePayload(_Payload):
    total_price_in_cents: int
    price_per_adult_in_cents: int
    discount_in_cents: Optional[int] = None
    operator_name: Optional[str] = None
    discount_type: str = "NONE"
    travel_class: str
    display_name: str
    is_best_option: bool = False

    def to_quote(self) -> PriceQuote:
        return PriceQuote(
            total_price_cents=self.total_price_in_cents,
            price_per_adult_cents=self.price_per_adult_in_cents,
            travel_class=TravelClass.from_api(self.travel_class),
            display_name=self.display_name,
            discount_type=self.discount_type,
            discount_cents=self.discount_in_cents,
            operator_name=self.operator_name,
            is_best_option=self.is_best_option,
        )


class PricesPayload(_Payload):
    prices: List[PricePayload] = Field(default_factory=list)


class PriceApiResponse(_Payload):
    payload: PricesPayload
