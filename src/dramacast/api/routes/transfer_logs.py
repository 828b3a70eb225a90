"""Series transfer log endpoints (admin, read-only)."""

import math
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from dramacast.adapters.catalog.base import DESCENDING, CatalogStore
from dramacast.api.deps import CatalogStoreDep
from dramacast.domain.enums import Collection
from dramacast.domain.models import TransferLogEntry

router = APIRouter(prefix="/series-transfer-logs", tags=["Transfer Logs"])


class SeriesSummary(BaseModel):
    """The live series a transfer produced."""

    id: UUID
    title: str
    image_ref: str
    banner_ref: str
    description: str | None = None


class TransferLogResponse(BaseModel):
    """One transfer log entry."""

    id: UUID
    pending_series_id: UUID
    series_id: UUID
    title: str
    scheduled_release_at: datetime
    transferred_at: datetime
    series: SeriesSummary | None = None


class Pagination(BaseModel):
    """Page metadata."""

    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool


class TransferLogListResponse(BaseModel):
    """A page of transfer log entries, newest first."""

    data: list[TransferLogResponse]
    pagination: Pagination


def _to_response(
    store: CatalogStore, entry: TransferLogEntry, with_description: bool = False
) -> TransferLogResponse:
    series_doc = store.find_one(Collection.LIVE_SERIES, {"id": entry.series_id})
    series = None
    if series_doc is not None:
        series = SeriesSummary(
            id=series_doc["id"],
            title=series_doc["title"],
            image_ref=series_doc["image_ref"],
            banner_ref=series_doc["banner_ref"],
            description=series_doc.get("description") if with_description else None,
        )
    return TransferLogResponse(
        id=entry.id,
        pending_series_id=entry.pending_series_id,
        series_id=entry.series_id,
        title=entry.title,
        scheduled_release_at=entry.scheduled_release_at,
        transferred_at=entry.transferred_at,
        series=series,
    )


@router.get("", response_model=TransferLogListResponse)
def list_transfer_logs(
    store: CatalogStoreDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> TransferLogListResponse:
    """List series transfer logs with pagination, most recent first."""
    total = store.count(Collection.TRANSFER_LOGS)
    docs = store.find(
        Collection.TRANSFER_LOGS,
        sort=[("transferred_at", DESCENDING)],
        skip=(page - 1) * limit,
        limit=limit,
    )
    total_pages = math.ceil(total / limit)

    return TransferLogListResponse(
        data=[_to_response(store, TransferLogEntry.from_document(doc)) for doc in docs],
        pagination=Pagination(
            current_page=page,
            total_pages=total_pages,
            total_items=total,
            items_per_page=limit,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        ),
    )


@router.get("/{log_id}", response_model=TransferLogResponse)
def get_transfer_log(log_id: UUID, store: CatalogStoreDep) -> TransferLogResponse:
    """Get a single transfer log entry."""
    doc = store.find_one(Collection.TRANSFER_LOGS, {"id": log_id})
    if doc is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Transfer log not found",
        )
    return _to_response(store, TransferLogEntry.from_document(doc), with_description=True)
