"""
Charts API endpoints.

Provides generated archetype series with Wyckoff annotations for charting.
"""

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from ...config import get_config
from ...synthetic.phases import ARCHETYPE_SPECS
from ...synthetic.types import InvalidArgumentError
from ...utils.logger import get_logger
from ..session import ChartSession
from .models import ChartMarker, OHLCVBar, VisibleRangeModel, VolumeBar

router = APIRouter(prefix="/charts", tags=["charts"])


class ArchetypeInfo(BaseModel):
    id: str
    title: str
    default_bars: int


class ArchetypeListResponse(BaseModel):
    """Response for GET /api/charts/archetypes."""

    archetypes: list[ArchetypeInfo]


class ReferenceRange(BaseModel):
    start: int
    end: int
    support: float
    resistance: float


class ChartConfigResponse(BaseModel):
    """Response for GET /api/charts/{archetype}."""

    archetype: str
    title: str
    bar_count: int
    seed: int | None = None
    data_hash: str
    data: list[OHLCVBar]
    volume: list[VolumeBar]
    markers: list[ChartMarker]
    visible_range: VisibleRangeModel
    ranges: list[ReferenceRange]


@router.get("/archetypes", response_model=ArchetypeListResponse)
async def list_archetypes() -> ArchetypeListResponse:
    """List the archetypes the generator can produce."""
    return ArchetypeListResponse(
        archetypes=[
            ArchetypeInfo(id=a.value, title=spec.title, default_bars=spec.default_bars)
            for a, spec in ARCHETYPE_SPECS.items()
        ]
    )


@router.get("/{archetype}", response_model=ChartConfigResponse)
async def get_chart_config(
    archetype: str,
    bars: int | None = Query(None, description="Bar count (default: archetype default)"),
    seed: int | None = Query(None, ge=0, description="Random seed"),
) -> ChartConfigResponse:
    """
    Get a generated chart for an archetype.

    Unknown archetypes fall back to the overview chart.
    """
    config = get_config()
    if bars is not None and bars > config.generator.max_bars:
        raise HTTPException(
            status_code=422,
            detail=f"bars must be <= {config.generator.max_bars}, got {bars}",
        )
    if seed is None:
        seed = config.generator.default_seed

    try:
        with ChartSession() as session:
            series = session.load_archetype(archetype, bar_count=bars, seed=seed)
            payload = session.chart_payload()
    except InvalidArgumentError as e:
        raise HTTPException(status_code=422, detail=str(e))

    get_logger().series(
        series.archetype.value, series.bar_count, series.seed, data_hash=series.data_hash
    )

    return ChartConfigResponse(
        archetype=payload["archetype"],
        title=ARCHETYPE_SPECS[series.archetype].title,
        bar_count=payload["bar_count"],
        seed=payload["seed"],
        data_hash=payload["data_hash"],
        data=[OHLCVBar(**bar) for bar in payload["data"]],
        volume=[VolumeBar(**v) for v in payload["volume"]],
        markers=[ChartMarker(**m) for m in payload["markers"]],
        visible_range=VisibleRangeModel(**payload["visible_range"]),
        ranges=[ReferenceRange(**r) for r in payload["ranges"]],
    )
