"""
Samples API endpoints.

Sample market data for a ticker with the scripted Wyckoff patterns,
their explanations and the markers left visible by the filters.
"""

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from ...config import get_config
from ...synthetic.sample_data import PatternType
from ...synthetic.types import InvalidArgumentError
from ...utils.logger import get_logger
from ..session import DEFAULT_CONFIDENCE_THRESHOLD, ChartSession, PatternNotFoundError
from .models import ChartMarker, OHLCVBar, VisibleRangeModel, VolumeBar

router = APIRouter(prefix="/samples", tags=["samples"])


class PatternExplanationModel(BaseModel):
    summary: str
    volume_analysis: str
    price_action: str
    key_levels: str


class ImplicationModel(BaseModel):
    text: str
    warning: bool = False


class DetectedPatternModel(BaseModel):
    id: str
    type: str
    start_index: int
    end_index: int
    start_time: int
    end_time: int
    confidence: int
    explanation: PatternExplanationModel
    implications: list[ImplicationModel]


class SampleResponse(BaseModel):
    """Response for GET /api/samples/{symbol}."""

    symbol: str
    timeframe: str
    seed: int | None = None
    data_hash: str
    data: list[OHLCVBar]
    volume: list[VolumeBar]
    markers: list[ChartMarker]
    patterns: list[DetectedPatternModel]
    visible_range: VisibleRangeModel


def _open_sample_session(
    symbol: str, timeframe: str, seed: int | None
) -> ChartSession:
    if seed is None:
        seed = get_config().generator.default_seed
    session = ChartSession()
    try:
        session.load_sample(symbol, timeframe=timeframe, seed=seed)
    except InvalidArgumentError as e:
        session.close()
        raise HTTPException(status_code=422, detail=str(e))
    return session


@router.get("/{symbol}", response_model=SampleResponse)
async def get_sample(
    symbol: str,
    timeframe: str = Query("1D", description="1D, 1W or 1M"),
    seed: int | None = Query(None, ge=0, description="Random seed"),
    confidence: int = Query(DEFAULT_CONFIDENCE_THRESHOLD, ge=0, le=100, description="Min confidence"),
    hide: list[PatternType] = Query([], description="Pattern types to hide"),
) -> SampleResponse:
    """Get sample data for a ticker with detected patterns."""
    with _open_sample_session(symbol, timeframe, seed) as session:
        for pattern_type in hide:
            session.set_visibility(pattern_type, False)
        session.set_confidence_threshold(confidence)
        payload = session.chart_payload()
        patterns = [p.to_dict() for p in session.visible_patterns()]

    get_logger().series(
        payload["symbol"], len(payload["data"]), payload["seed"],
        kind="symbol", timeframe=payload["timeframe"], patterns=len(patterns),
    )

    return SampleResponse(
        symbol=payload["symbol"],
        timeframe=payload["timeframe"],
        seed=payload["seed"],
        data_hash=payload["data_hash"],
        data=[OHLCVBar(**bar) for bar in payload["data"]],
        volume=[VolumeBar(**v) for v in payload["volume"]],
        markers=[ChartMarker(**m) for m in payload["markers"]],
        patterns=[DetectedPatternModel(**p) for p in patterns],
        visible_range=VisibleRangeModel(**payload["visible_range"]),
    )


@router.get("/{symbol}/patterns/{pattern_id}/zoom", response_model=VisibleRangeModel)
async def zoom_to_pattern(
    symbol: str,
    pattern_id: str,
    timeframe: str = Query("1D", description="1D, 1W or 1M"),
    seed: int | None = Query(None, ge=0, description="Random seed"),
) -> VisibleRangeModel:
    """Viewport (Unix seconds) around a pattern, padded by 10 bars."""
    with _open_sample_session(symbol, timeframe, seed) as session:
        try:
            visible = session.zoom_to_pattern(pattern_id)
        except PatternNotFoundError:
            raise HTTPException(status_code=404, detail=f"Pattern {pattern_id} not found")
        bars = session.dataset.bars
        return VisibleRangeModel(**{
            "from": bars[visible.from_index].chart_time,
            "to": bars[visible.to_index].chart_time,
        })
