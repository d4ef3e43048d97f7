from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from paytrack.core.dependencies import get_stats_aggregator, get_store
from paytrack.db.store import RecordStore
from paytrack.schemas.stats import StatsResponse
from paytrack.services.analytics_service import StatisticsAggregator
from paytrack.services.export_service import export_csv

router = APIRouter(prefix="/api", tags=["Analytics"])


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    as_of: date | None = Query(None),
    aggregator: StatisticsAggregator = Depends(get_stats_aggregator),
):
    return aggregator.compute_stats(as_of or date.today())


@router.get("/export")
def export_payments(store: RecordStore = Depends(get_store)):
    return Response(
        content=export_csv(store),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=client-payments.csv"},
    )
