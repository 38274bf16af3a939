"""Sector taxonomy endpoint: departments and categories for filter hints."""

from __future__ import annotations

from fastapi import APIRouter

from sectorcast.api.schemas.forecast import SectorDTO
from sectorcast.forecasting.taxonomy import TAXONOMIES

router = APIRouter()


@router.get("", response_model=list[SectorDTO], summary="Sector taxonomies")
async def list_sectors() -> list[SectorDTO]:
    return [
        SectorDTO(
            id=sector.value,
            name=tax.name,
            departments=list(tax.departments),
            categories=list(tax.categories),
            focus=tax.focus,
        )
        for sector, tax in TAXONOMIES.items()
    ]
