"""
Response models shared by the chart routes.
"""

from pydantic import BaseModel, ConfigDict, Field


class OHLCVBar(BaseModel):
    """Single OHLCV bar."""

    time: int  # bar index for archetypes, Unix seconds for samples
    open: float
    high: float
    low: float
    close: float
    volume: float | None = None


class VolumeBar(BaseModel):
    """Single volume bar."""

    time: int
    value: float
    color: str


class ChartMarker(BaseModel):
    """lightweight-charts series marker."""

    time: int
    position: str  # aboveBar / belowBar
    color: str
    shape: str
    text: str


class VisibleRangeModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: int = Field(alias="from")
    to: int
