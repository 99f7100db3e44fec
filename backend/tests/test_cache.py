"""
Tests for the digest-checked series cache and artifact persistence.
"""

import os

import pytest

from ghcn_trends.config import Variable
from ghcn_trends.engine.cache import (
    SeriesCacheEntry,
    build_series,
    file_digest,
    load_artifact,
    save_artifact,
    series_cache_path,
    source_digest,
)
from ghcn_trends.engine.exceptions import FormatError, MissingFileError
from ghcn_trends.models.series import TrendResult

from conftest import write_observations, year_records


@pytest.fixture
def obs_dir(tmp_path):
    obs = str(tmp_path / "observations")
    write_observations(obs, "S1", "TMAX", year_records(1950, 300) + year_records(1951, 310))
    write_observations(obs, "S1", "TMIN", year_records(1950, 100) + year_records(1951, 110))
    return obs


@pytest.fixture
def cache_dir(tmp_path):
    return str(tmp_path / "cache")


class TestArtifacts:
    def test_save_and_load(self, tmp_path):
        path = str(tmp_path / "a" / "trend.json")
        save_artifact(path, TrendResult(intercept=-50.5, slope=0.0287))
        loaded = load_artifact(path, TrendResult)
        assert loaded == TrendResult(intercept=-50.5, slope=0.0287)

    def test_overwrite_leaves_no_temp_files(self, tmp_path):
        path = str(tmp_path / "trend.json")
        save_artifact(path, TrendResult(intercept=1.0, slope=1.0))
        save_artifact(path, TrendResult(intercept=2.0, slope=2.0))
        assert os.listdir(tmp_path) == ["trend.json"]
        assert load_artifact(path, TrendResult).slope == 2.0

    def test_missing_artifact(self, tmp_path):
        with pytest.raises(MissingFileError):
            load_artifact(str(tmp_path / "nope.json"), TrendResult)

    def test_corrupt_artifact(self, tmp_path):
        path = tmp_path / "trend.json"
        path.write_text('{"intercept": "x"')
        with pytest.raises(FormatError):
            load_artifact(str(path), TrendResult)


class TestDigests:
    def test_digest_changes_with_content(self, tmp_path):
        path = tmp_path / "f"
        path.write_bytes(b"one")
        before = file_digest(str(path))
        path.write_bytes(b"two")
        assert file_digest(str(path)) != before

    def test_missing_source(self, tmp_path):
        with pytest.raises(MissingFileError):
            source_digest(str(tmp_path), "S1", Variable.TMAX)

    def test_derived_digest_tracks_sources(self, obs_dir):
        before = source_digest(obs_dir, "S1", Variable.TAVG)
        write_observations(obs_dir, "S1", "TMIN", year_records(1950, 101))
        assert source_digest(obs_dir, "S1", Variable.TAVG) != before


class TestBuildSeries:
    def test_uncached_build(self, obs_dir):
        series = build_series(obs_dir, "S1", Variable.TMAX)
        assert series.year_set() == {1950, 1951}

    def test_writes_cache_entry(self, obs_dir, cache_dir):
        build_series(obs_dir, "S1", Variable.TMAX, cache_dir)
        entry = load_artifact(series_cache_path(cache_dir, "S1", Variable.TMAX), SeriesCacheEntry)
        assert entry.source_digest == source_digest(obs_dir, "S1", Variable.TMAX)

    def test_cached_equals_recomputed(self, obs_dir, cache_dir):
        first = build_series(obs_dir, "S1", Variable.TAVG, cache_dir)
        reloaded = build_series(obs_dir, "S1", Variable.TAVG, cache_dir)
        recomputed = build_series(obs_dir, "S1", Variable.TAVG)
        assert reloaded == first
        assert reloaded == recomputed
        assert reloaded.years[1951][0] == pytest.approx(210.0)

    def test_derived_sources_cached(self, obs_dir, cache_dir):
        build_series(obs_dir, "S1", Variable.TAVG, cache_dir)
        for var in (Variable.TMAX, Variable.TMIN, Variable.TAVG):
            assert os.path.isfile(series_cache_path(cache_dir, "S1", var))

    def test_cache_hit_skips_raw_parse(self, obs_dir, cache_dir, monkeypatch):
        build_series(obs_dir, "S1", Variable.TMAX, cache_dir)

        def fail(*args, **kwargs):
            raise AssertionError("raw file was re-parsed")

        monkeypatch.setattr("ghcn_trends.engine.cache.load_series_map", fail)
        assert build_series(obs_dir, "S1", Variable.TMAX, cache_dir).year_set() == {1950, 1951}

    def test_changed_source_invalidates(self, obs_dir, cache_dir):
        build_series(obs_dir, "S1", Variable.TMAX, cache_dir)
        write_observations(obs_dir, "S1", "TMAX", year_records(1960, 250))
        series = build_series(obs_dir, "S1", Variable.TMAX, cache_dir)
        assert series.year_set() == {1960}

    def test_changed_source_invalidates_derived(self, obs_dir, cache_dir):
        build_series(obs_dir, "S1", Variable.TAVG, cache_dir)
        write_observations(obs_dir, "S1", "TMIN", year_records(1951, 90))
        tavg = build_series(obs_dir, "S1", Variable.TAVG, cache_dir)
        assert tavg.year_set() == {1951}
        assert tavg.years[1951][0] == pytest.approx(200.0)

    def test_corrupt_entry_rebuilt(self, obs_dir, cache_dir):
        path = series_cache_path(cache_dir, "S1", Variable.TMAX)
        os.makedirs(os.path.dirname(path))
        with open(path, "w") as f:
            f.write("garbage")
        series = build_series(obs_dir, "S1", Variable.TMAX, cache_dir)
        assert series.year_set() == {1950, 1951}
        assert load_artifact(path, SeriesCacheEntry).series == series

    def test_format_error_not_cached(self, obs_dir, cache_dir):
        write_observations(obs_dir, "S2", "TMAX", [("19500101", "bad")])
        with pytest.raises(FormatError):
            build_series(obs_dir, "S2", Variable.TMAX, cache_dir)
        assert not os.path.exists(series_cache_path(cache_dir, "S2", Variable.TMAX))
