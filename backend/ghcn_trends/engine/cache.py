"""
Transparent on-disk cache for derived values.

Series maps are cached per (station, variable) as JSON next to the SHA-256
digest of the raw file(s) they were built from. A cached entry is used only
while that digest still matches; otherwise it is rebuilt from source and
rewritten. Whole-run artifacts (coverage tables, good-year maps, trend maps)
are saved and loaded as plain pydantic JSON.
"""

import hashlib
import logging
import os
import tempfile
from typing import Iterable, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ghcn_trends.config import Variable, DERIVED_VARIABLES
from ghcn_trends.engine.derived import average_series
from ghcn_trends.engine.exceptions import FormatError, MissingFileError
from ghcn_trends.engine.observations import load_series_map, observation_path
from ghcn_trends.models.series import SeriesMap

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class SeriesCacheEntry(BaseModel):
    """A cached series map and the digest of the raw input it came from."""
    source_digest: str
    series: SeriesMap


def file_digest(path: str) -> str:
    """SHA-256 hex digest of a file's bytes."""
    if not os.path.isfile(path):
        raise MissingFileError(f"Observation file not found: {path}")
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1 << 16), b""):
            h.update(chunk)
    return h.hexdigest()


def source_digest(observations_dir: str, station_id: str, variable: Variable) -> str:
    """Digest of the raw input behind a raw or derived variable."""
    if variable in DERIVED_VARIABLES:
        h = hashlib.sha256()
        for source in DERIVED_VARIABLES[variable]:
            h.update(source_digest(observations_dir, station_id, source).encode("ascii"))
        return h.hexdigest()
    return file_digest(observation_path(observations_dir, station_id, variable))


def station_source_digests(
    observations_dir: str,
    station_id: str,
    variables: Iterable[Variable],
) -> dict[Variable, Optional[str]]:
    """Digest of each variable's raw input for one station; None where the file is absent."""
    digests: dict[Variable, Optional[str]] = {}
    for variable in variables:
        try:
            digests[variable] = source_digest(observations_dir, station_id, variable)
        except MissingFileError:
            digests[variable] = None
    return digests


def save_artifact(path: str, model: BaseModel) -> None:
    """Write a pydantic model as JSON, replacing any existing file atomically."""
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(model.model_dump_json())
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise


def load_artifact(path: str, model_cls: Type[ModelT]) -> ModelT:
    """Read a JSON artifact written by save_artifact."""
    if not os.path.isfile(path):
        raise MissingFileError(f"Cache artifact not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
    try:
        return model_cls.model_validate_json(content)
    except ValidationError as e:
        raise FormatError(f"Corrupt cache artifact {path}: {e}") from e


def series_cache_path(cache_dir: str, station_id: str, variable: Variable) -> str:
    return os.path.join(cache_dir, station_id, f"{variable.value}.json")


def selection_artifact_path(cache_dir: str, criteria: BaseModel) -> str:
    """Location of a saved selection result, keyed by the criteria that produced it."""
    key = hashlib.sha256(criteria.model_dump_json().encode("utf-8")).hexdigest()[:16]
    return os.path.join(cache_dir, "selections", f"{key}.json")


def _read_cached_series(path: str, digest: str) -> Optional[SeriesMap]:
    """Cached series if present, readable, and built from the current raw input."""
    if not os.path.isfile(path):
        return None
    try:
        entry = load_artifact(path, SeriesCacheEntry)
    except FormatError as e:
        logger.warning("Ignoring unreadable cache entry %s: %s", path, e)
        return None
    if entry.source_digest != digest:
        logger.debug("Cache entry %s is stale", path)
        return None
    return entry.series


def build_series(
    observations_dir: str,
    station_id: str,
    variable: Variable,
    cache_dir: Optional[str] = None,
) -> SeriesMap:
    """
    Series map for one station/variable, recomputed from raw input unless a
    current cache entry exists. Derived variables are synthesized from their
    (possibly cached) sources.
    """
    if cache_dir is None:
        return _compute_series(observations_dir, station_id, variable, None)

    digest = source_digest(observations_dir, station_id, variable)
    path = series_cache_path(cache_dir, station_id, variable)

    cached = _read_cached_series(path, digest)
    if cached is not None:
        logger.debug("Cache hit for %s/%s", station_id, variable.value)
        return cached

    series = _compute_series(observations_dir, station_id, variable, cache_dir)
    save_artifact(path, SeriesCacheEntry(source_digest=digest, series=series))
    return series


def _compute_series(
    observations_dir: str,
    station_id: str,
    variable: Variable,
    cache_dir: Optional[str],
) -> SeriesMap:
    if variable in DERIVED_VARIABLES:
        first, second = DERIVED_VARIABLES[variable]
        return average_series(
            build_series(observations_dir, station_id, first, cache_dir),
            build_series(observations_dir, station_id, second, cache_dir),
            variable=variable,
        )
    return load_series_map(observations_dir, station_id, variable)
