"""
Tests for ResultCache (LRU + TTL memoization of results).
"""

import dataclasses
import threading

import pytest

from windzone.core.data_models import (
    CalculationRequest,
    LShapeGeometry,
    RectangleGeometry,
    WindSpeedData,
)
from windzone.core.errors import ValidationError
from windzone.orchestration.result_cache import (
    ResultCache,
    canonical_params,
    fingerprint,
)


@pytest.fixture
def result(engine, request_data):
    return engine.calculate_request(request_data)


@pytest.fixture
def cache(clock):
    return ResultCache(max_entries=3, default_ttl=60.0, clock=clock)


def _request(request_data, length):
    geometry = RectangleGeometry(length=length, width=80.0, height=30.0)
    return dataclasses.replace(request_data, geometry=geometry)


class TestFingerprint:

    def test_mapping_key_order_irrelevant(self):
        a = {"height": 30, "length": 100, "width": 80, "city": "Miami"}
        b = {"city": "Miami", "width": 80, "length": 100, "height": 30}
        assert fingerprint(a) == fingerprint(b)

    def test_request_keys(self, request_data):
        data = canonical_params(request_data)

        assert data["windSpeed"] == 120.0
        assert data["exposureCategory"] == "C"
        assert data["city"] == "Miami"
        assert data["asceEdition"] == "ASCE 7-22"
        assert "shape" not in data

    def test_wind_data_overrides_speed(self, request_data):
        data = canonical_params(request_data, WindSpeedData(value=150.0, source="manual"))
        assert data["windSpeed"] == 150.0

    def test_inputs_that_change_result_change_key(self, request_data):
        base = fingerprint(request_data)
        wind = dataclasses.replace(request_data.wind, include_internal_pressure=False)
        assert fingerprint(dataclasses.replace(request_data, wind=wind)) != base
        assert fingerprint(dataclasses.replace(request_data, city="Tampa")) != base

    def test_l_shape_offset_in_key(self, request_data):
        def l_request(offset):
            geometry = LShapeGeometry(
                length1=100.0, width1=60.0, length2=50.0, width2=30.0, height=20.0, offset_y=offset
            )
            return dataclasses.replace(request_data, geometry=geometry)

        assert fingerprint(l_request(0.0)) != fingerprint(l_request(10.0))
        assert canonical_params(l_request(0.0))["shape"] == "l_shape"

    def test_mapping_ignores_incidental_keys(self):
        base = {"height": 30, "length": 100, "width": 80, "city": "Miami", "windSpeed": 120}

        assert fingerprint({**base, "projectName": "Other", "showDetails": True}) == fingerprint(base)
        assert fingerprint({**base, "windSpeed": 130}) != fingerprint(base)

    def test_glazing_failure_flag_in_key(self, request_data):
        wind = dataclasses.replace(request_data.wind, consider_glazing_failure=True)

        assert canonical_params(request_data)["considerGlazingFailure"] is False
        assert fingerprint(dataclasses.replace(request_data, wind=wind)) != fingerprint(request_data)

    def test_unsupported_params(self):
        with pytest.raises(ValidationError):
            fingerprint(42)


class TestGetSet:

    def test_round_trip(self, cache, request_data, result):
        assert cache.get(request_data) is None
        key = cache.set(request_data, result)

        assert key == fingerprint(request_data)
        assert cache.get(request_data) is result
        assert len(cache) == 1

    def test_equivalent_mapping_hits(self, cache, result):
        cache.set({"length": 100, "width": 80}, result)
        assert cache.get({"width": 80, "length": 100}) is result

    def test_wind_data_distinguishes_entries(self, cache, request_data, result):
        cache.set(request_data, result, WindSpeedData(value=150.0))

        assert cache.get(request_data) is None
        assert cache.get(request_data, WindSpeedData(value=150.0)) is result

    def test_has_does_not_touch_metrics(self, cache, request_data, result):
        cache.set(request_data, result)

        assert cache.has(request_data) is True
        assert cache.metrics().total_requests == 0

    def test_overwrite_same_key(self, cache, request_data, result, engine):
        cache.set(request_data, result)
        other = engine.calculate(request_data.geometry, request_data.wind)
        cache.set(request_data, other)

        assert len(cache) == 1
        assert cache.get(request_data) is other


class TestExpiry:

    def test_entry_expires_at_ttl(self, cache, clock, request_data, result):
        cache.set(request_data, result)

        clock.advance(59.0)
        assert cache.get(request_data) is result
        clock.advance(1.0)
        assert cache.get(request_data) is None
        assert cache.has(request_data) is False

    def test_per_entry_ttl(self, cache, clock, request_data, result):
        cache.set(request_data, result, ttl=5.0)
        clock.advance(5.0)
        assert cache.get(request_data) is None

    def test_set_purges_expired(self, cache, clock, request_data, result):
        cache.set(_request(request_data, 100.0), result)
        cache.set(_request(request_data, 110.0), result)
        clock.advance(61.0)
        cache.set(_request(request_data, 120.0), result)

        assert len(cache) == 1

    def test_invalid_ttl(self, cache, request_data, result):
        with pytest.raises(ValidationError):
            cache.set(request_data, result, ttl=0)


class TestEviction:

    def test_least_recently_used_evicted(self, cache, request_data, result):
        a, b, c, d = (_request(request_data, n) for n in (100.0, 110.0, 120.0, 130.0))
        for params in (a, b, c):
            cache.set(params, result)

        # Touch a so b becomes least recently used
        cache.get(a)
        cache.set(d, result)

        assert len(cache) == 3
        assert cache.has(a) and cache.has(c) and cache.has(d)
        assert not cache.has(b)

    def test_never_exceeds_capacity(self, cache, request_data, result):
        for n in range(10):
            cache.set(_request(request_data, 100.0 + n), result)
        assert len(cache) == 3
        assert cache.info() == {"entries": 3, "max_entries": 3, "usage_percent": 100.0}

    def test_invalid_capacity(self):
        with pytest.raises(ValidationError):
            ResultCache(max_entries=0)


class TestIntegrity:

    def test_corrupt_entry_is_a_miss(self, cache, request_data, result):
        key = cache.set(request_data, result)
        cache._entries[key].checksum = "0" * 64

        assert cache.get(request_data) is None
        assert len(cache) == 0
        assert cache.metrics().misses == 1


class TestMetrics:

    def test_hit_rate(self, cache, request_data, result):
        cache.get(request_data)
        cache.set(request_data, result)
        cache.get(request_data)
        cache.get(request_data)
        cache.get(request_data)

        metrics = cache.metrics()
        assert metrics.total_requests == 4
        assert metrics.hits == 3
        assert metrics.misses == 1
        assert metrics.hit_rate == pytest.approx(75.0)

    def test_metrics_snapshot_is_immutable(self, cache, request_data):
        snapshot = cache.metrics()
        cache.get(request_data)

        assert snapshot.total_requests == 0
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.hits = 5

    def test_average_calculation_time(self, cache):
        cache.record_calculation_time(1.0)
        cache.record_calculation_time(3.0)

        metrics = cache.metrics()
        assert metrics.average_calculation_time == pytest.approx(2.0)
        assert metrics.timed_calculations == 2

    def test_clear_resets(self, cache, request_data, result):
        cache.set(request_data, result)
        cache.get(request_data)
        cache.clear()

        assert len(cache) == 0
        assert cache.metrics().total_requests == 0

    def test_popular_entries(self, cache, request_data, result):
        a, b = _request(request_data, 100.0), _request(request_data, 110.0)
        cache.set(a, result)
        cache.set(b, result)
        cache.get(b)
        cache.get(b)
        cache.get(a)

        assert cache.popular_entries() == [(fingerprint(b), 2), (fingerprint(a), 1)]
        assert len(cache.popular_entries(limit=1)) == 1


class TestHelpers:

    def test_preload(self, cache, request_data, result):
        count = cache.preload([
            (_request(request_data, 100.0), result, None),
            (_request(request_data, 110.0), result, WindSpeedData(value=140.0)),
        ])

        assert count == 2
        assert cache.has(_request(request_data, 110.0), WindSpeedData(value=140.0))

    def test_preload_pairs(self, cache, request_data, result):
        assert cache.preload([(_request(request_data, 120.0), result)]) == 1
        assert cache.get(_request(request_data, 120.0)) is result

    def test_preload_rejects_malformed_item(self, cache, result):
        with pytest.raises(ValidationError):
            cache.preload([(result,)])

    def test_get_or_compute(self, cache, request_data, result):
        calls = []

        def compute():
            calls.append(1)
            return result

        assert cache.get_or_compute(request_data, compute) is result
        assert cache.get_or_compute(request_data, compute) is result
        assert len(calls) == 1
        assert cache.metrics().timed_calculations == 1

    def test_concurrent_sets_respect_capacity(self, request_data, result):
        cache = ResultCache(max_entries=5)
        requests = [_request(request_data, 100.0 + n) for n in range(40)]

        def worker(chunk):
            for params in chunk:
                cache.set(params, result)
                cache.get(params)

        threads = [threading.Thread(target=worker, args=(requests[i::4],)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(cache) == 5
        assert cache.metrics().total_requests == 40


class TestCalculationRequestKeys:

    def test_request_and_equivalent_request_share_key(self, request_data):
        clone = CalculationRequest(
            geometry=RectangleGeometry(length=100.0, width=80.0, height=30.0),
            wind=request_data.wind,
            city="Miami",
            state="FL",
            project_name="Other name",
        )
        # Project name is not part of the key
        assert fingerprint(clone) == fingerprint(request_data)
