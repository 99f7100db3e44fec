"""
Shared FastAPI dependencies.
"""

from functools import lru_cache

from fastapi import HTTPException

from ghcn_trends.config import DATA_DIR
from ghcn_trends.engine.exceptions import GHCNTrendsError
from ghcn_trends.engine.stations import load_dataset_context
from ghcn_trends.models.selection import DatasetContext


@lru_cache(maxsize=1)
def _load_context() -> DatasetContext:
    return load_dataset_context(DATA_DIR)


def get_dataset_context() -> DatasetContext:
    """Dataset context for the configured data directory, loaded once."""
    try:
        return _load_context()
    except GHCNTrendsError as e:
        raise HTTPException(status_code=503, detail=f"Dataset not available: {e}")
