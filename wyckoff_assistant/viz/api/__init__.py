"""
Visualization API routes.

All endpoints are mounted under /api prefix.
"""

from .charts import router as charts_router
from .samples import router as samples_router

__all__ = [
    "charts_router",
    "samples_router",
]
