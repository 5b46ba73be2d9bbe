"""Partner endpoints — roster CRUD."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from swiftroute.domain.entities.partner import Partner
from swiftroute.domain.errors import (
    DispatchError,
    NotFoundError,
    UpstreamServiceError,
    UpstreamTimeoutError,
    ValidationError,
)
from swiftroute.domain.value_objects.enums import PartnerStatus
from swiftroute.domain.value_objects.shift_window import ShiftWindow
from swiftroute.infrastructure.api.dependencies import Storage, get_storage
from swiftroute.infrastructure.api.schemas import PartnerCreate, PartnerUpdate
from swiftroute.infrastructure.api.serializers import serialize_partner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/partners", tags=["partners"])


def _parse_partner_status(raw: str) -> PartnerStatus:
    try:
        return PartnerStatus(raw.strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in PartnerStatus)
        raise ValidationError(f"Invalid partner status '{raw}'. Allowed: {allowed}.") from None


def _parse_shift(start: str, end: str) -> ShiftWindow:
    try:
        return ShiftWindow.parse(start, end)
    except ValueError as e:
        raise ValidationError(str(e)) from None


async def _load_partner(storage: Storage, partner_id: str) -> Partner:
    partner = await storage.partners.get_by_id(partner_id)
    if partner is None:
        raise NotFoundError(f"Partner with ID {partner_id} not found")
    return partner


@router.get("")
async def list_partners(storage: Storage = Depends(get_storage)):
    """All partners, by name."""
    return [serialize_partner(p) for p in await storage.partners.get_all()]


@router.post("", status_code=201)
async def create_partner(body: PartnerCreate, storage: Storage = Depends(get_storage)):
    partner = Partner(
        id=None,
        name=body.name.strip(),
        email=body.email.strip().lower(),
        phone=body.phone.strip(),
        shift=_parse_shift(body.shift_start, body.shift_end),
        status=_parse_partner_status(body.status),
        assigned_areas=body.assigned_areas,
        current_load=body.current_load,
        rating=body.rating,
    )
    try:
        await storage.partners.save(partner)
        await storage.tx.commit()
    except TimeoutError as e:
        await storage.tx.rollback()
        raise UpstreamTimeoutError("Timed out trying to create partner.", detail=str(e)) from e
    except Exception as e:
        logger.exception("Error creating partner %s", partner.email)
        await storage.tx.rollback()
        raise UpstreamServiceError("Failed to create partner.", detail=str(e)) from e
    logger.info("Partner %s created (%s)", partner.id, partner.name)
    return serialize_partner(partner)


@router.get("/{partner_id}")
async def get_partner(partner_id: str, storage: Storage = Depends(get_storage)):
    return serialize_partner(await _load_partner(storage, partner_id))


@router.put("/{partner_id}")
async def update_partner(
    partner_id: str,
    body: PartnerUpdate,
    storage: Storage = Depends(get_storage),
):
    """Partial update: only the fields present in the body change."""
    fields = body.model_dump(exclude_unset=True)
    if not fields:
        raise ValidationError("No fields provided for update.")

    partner = await _load_partner(storage, partner_id)
    for name in ("name", "phone"):
        if fields.get(name) is not None:
            setattr(partner, name, fields[name].strip())
    if fields.get("email") is not None:
        partner.email = fields["email"].strip().lower()
    if fields.get("status") is not None:
        partner.status = _parse_partner_status(fields["status"])
    if fields.get("assigned_areas") is not None:
        partner.assigned_areas = fields["assigned_areas"]
    if fields.get("current_load") is not None:
        partner.current_load = fields["current_load"]
    if fields.get("rating") is not None:
        partner.rating = fields["rating"]
    if fields.get("shift_start") is not None or fields.get("shift_end") is not None:
        partner.shift = _parse_shift(
            fields.get("shift_start") or f"{partner.shift.start:%H:%M}",
            fields.get("shift_end") or f"{partner.shift.end:%H:%M}",
        )

    try:
        await storage.partners.update(partner)
        await storage.tx.commit()
    except TimeoutError as e:
        await storage.tx.rollback()
        raise UpstreamTimeoutError("Timed out trying to update partner.", detail=str(e)) from e
    except Exception as e:
        logger.exception("Error updating partner %s", partner_id)
        await storage.tx.rollback()
        raise UpstreamServiceError("Failed to update partner.", detail=str(e)) from e
    return {"message": "Partner updated successfully", "partner": serialize_partner(partner)}


@router.delete("/{partner_id}")
async def delete_partner(partner_id: str, storage: Storage = Depends(get_storage)):
    try:
        deleted = await storage.partners.delete(partner_id)
        await storage.tx.commit()
    except DispatchError:
        await storage.tx.rollback()
        raise
    except TimeoutError as e:
        await storage.tx.rollback()
        raise UpstreamTimeoutError("Timed out trying to delete partner.", detail=str(e)) from e
    except Exception as e:
        logger.exception("Error deleting partner %s", partner_id)
        await storage.tx.rollback()
        raise UpstreamServiceError("Failed to delete partner.", detail=str(e)) from e
    if not deleted:
        raise NotFoundError(f"Partner with ID {partner_id} not found")
    logger.info("Partner %s deleted", partner_id)
    return {"message": f"Partner {partner_id} deleted successfully"}
