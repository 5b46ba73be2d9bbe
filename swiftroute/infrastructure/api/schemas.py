"""Request bodies. Field names are camelCase on the wire."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from swiftroute.adapters.csv_loader.normalizer import parse_areas
from swiftroute.domain.entities.partner import MAX_RATING


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderItemIn(CamelModel):
    name: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)


class OrderCreate(CamelModel):
    customer_name: str = Field(min_length=1)
    customer_phone: str | None = None
    items: list[OrderItemIn] = Field(default_factory=list)
    area: str = Field(min_length=1)
    delivery_address: str = Field(min_length=1)
    order_value: float = Field(ge=0)


class OrderStatusUpdate(CamelModel):
    status: str = Field(min_length=1)
    assigned_partner_id: str | None = None


class AssignOrderRequest(CamelModel):
    order_id: str = Field(min_length=1)
    partner_id: str | None = None


def _split_areas(value):
    if value is None or isinstance(value, (str, list)):
        return parse_areas(value)
    return value


# Accepts a JSON list or a comma-separated string.
AreaList = Annotated[list[str], BeforeValidator(_split_areas)]


class PartnerCreate(CamelModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: str = Field(min_length=1)
    shift_start: str
    shift_end: str
    status: str = "active"
    assigned_areas: AreaList = Field(default_factory=list)
    current_load: int = Field(default=0, ge=0)
    rating: float = Field(default=0.0, ge=0, le=MAX_RATING)


class PartnerUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, min_length=3)
    phone: str | None = Field(default=None, min_length=1)
    shift_start: str | None = None
    shift_end: str | None = None
    status: str | None = None
    assigned_areas: AreaList | None = None
    current_load: int | None = Field(default=None, ge=0)
    rating: float | None = Field(default=None, ge=0, le=MAX_RATING)


class ReportFailureRequest(CamelModel):
    order_id: str = Field(min_length=1)
    reason: str = ""


class SuggestOrderIn(CamelModel):
    id: str | None = None
    customer_name: str = ""
    area: str = Field(min_length=1)
    delivery_address: str = ""
    items: list[OrderItemIn] = Field(default_factory=list)
    order_value: float = Field(default=0.0, ge=0)


class SuggestPartnerIn(CamelModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    assigned_areas: AreaList = Field(default_factory=list)
    current_load: int = Field(default=0, ge=0)
    shift_start: str = "00:00"
    shift_end: str = "00:00"
    status: str = "active"
    rating: float = Field(default=0.0, ge=0, le=MAX_RATING)


class SuggestAssignmentRequest(CamelModel):
    order: SuggestOrderIn
    partners: list[SuggestPartnerIn]
