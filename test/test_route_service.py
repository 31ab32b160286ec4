"""Unit tests for the route variant orchestrator."""

import asyncio
import math

import pytest

from looproute.errors import InvalidRouteRequestError, MapServiceError, RouteGenerationError
from looproute.models.geo import GeoPoint
from looproute.models.request import RouteRequest
from looproute.services.route_service import RouteService, RouteVariants
from map_fakes import CENTER, FakeMapService, make_route

# First search attempt uses radius 5.25 km: 8 ring points for a full circle,
# 6 for a 270° arc, plus start and end
FULL_CIRCLE_POINTS = 10
ARC_270_POINTS = 8


def _service(map_service, policy="best_effort"):
    return RouteService(map_service=map_service, arc_spans=[360.0, 270.0], variant_policy=policy)


def test_generates_one_route_per_arc_in_order():
    map_service = FakeMapService(distance_km=5.0)

    variants = asyncio.run(_service(map_service).generate_variants(CENTER, 5.0))

    assert variants.arc_spans == [360.0, 270.0]
    assert len(variants) == 2
    assert len(variants.routes[0].waypoints) == FULL_CIRCLE_POINTS
    assert len(variants.routes[1].waypoints) == ARC_270_POINTS
    assert variants.selected_index == 0
    assert variants.current is variants.routes[0]


def test_generate_routes_returns_plain_list():
    routes = asyncio.run(_service(FakeMapService(distance_km=5.0)).generate_routes(CENTER, 5.0))

    assert len(routes) == 2
    assert all(route.distance_km == 5.0 for route in routes)


def test_explicit_arc_spans_override_defaults():
    variants = asyncio.run(
        _service(FakeMapService(distance_km=5.0)).generate_variants(CENTER, 5.0, [180.0])
    )

    assert variants.arc_spans == [180.0]


@pytest.mark.parametrize("target_km", [0.0, -3.0, math.nan, math.inf])
def test_invalid_target_rejected_before_network(target_km):
    map_service = FakeMapService()

    with pytest.raises(InvalidRouteRequestError):
        asyncio.run(_service(map_service).generate_variants(CENTER, target_km))

    assert map_service.snap_calls == []


@pytest.mark.parametrize("arc_spans", [[], [0.0], [360.0, 361.0], [-90.0]])
def test_invalid_arc_spans_rejected_before_network(arc_spans):
    map_service = FakeMapService()

    with pytest.raises(InvalidRouteRequestError):
        asyncio.run(_service(map_service).generate_variants(CENTER, 5.0, arc_spans))

    assert map_service.snap_calls == []


def test_center_near_antimeridian_generates_routes():
    center = GeoPoint(lat=-16.8, lng=179.98)
    map_service = FakeMapService(distance_km=5.0)

    variants = asyncio.run(_service(map_service).generate_variants(center, 5.0))

    assert len(variants) == 2
    for route in variants.routes:
        assert all(-180.0 <= point.lng <= 180.0 for point in route.waypoints)
        assert any(point.lng < 0 for point in route.waypoints)


@pytest.mark.parametrize("policy", ["best_effort", "all_or_nothing"])
def test_center_next_to_pole_is_invalid_request(policy):
    map_service = FakeMapService(distance_km=5.0)

    with pytest.raises(InvalidRouteRequestError):
        asyncio.run(
            _service(map_service, policy).generate_variants(GeoPoint(lat=89.99, lng=10.0), 5.0)
        )

    assert map_service.snap_calls == []


def test_unknown_variant_policy_rejected():
    with pytest.raises(ValueError):
        RouteService(map_service=FakeMapService(), variant_policy="first_wins")


def test_best_effort_drops_failed_variant():
    map_service = FakeMapService(
        distance_km=5.0, fail_directions_for=lambda wps: len(wps) == ARC_270_POINTS
    )

    variants = asyncio.run(_service(map_service).generate_variants(CENTER, 5.0))

    assert variants.arc_spans == [360.0]
    assert len(variants.routes) == 1


def test_best_effort_fails_when_every_variant_fails():
    map_service = FakeMapService(fail_directions_for=lambda wps: True)

    with pytest.raises(RouteGenerationError) as exc_info:
        asyncio.run(_service(map_service).generate_variants(CENTER, 5.0))

    assert isinstance(exc_info.value.__cause__, MapServiceError)


def test_all_or_nothing_cancels_remaining_variants():
    map_service = FakeMapService(
        distance_km=5.0,
        fail_directions_for=lambda wps: len(wps) == ARC_270_POINTS,
        block_directions_for=lambda wps: len(wps) == FULL_CIRCLE_POINTS,
    )

    with pytest.raises(MapServiceError):
        asyncio.run(_service(map_service, "all_or_nothing").generate_variants(CENTER, 5.0))

    assert map_service.cancelled == 1


def test_all_or_nothing_returns_all_routes():
    variants = asyncio.run(
        _service(FakeMapService(distance_km=5.0), "all_or_nothing").generate_variants(CENTER, 5.0)
    )

    assert variants.arc_spans == [360.0, 270.0]


@pytest.mark.parametrize("policy", ["best_effort", "all_or_nothing"])
def test_cancellation_fans_out_to_every_variant(policy):
    map_service = FakeMapService(block_directions_for=lambda wps: True)
    service = _service(map_service, policy)

    async def run():
        task = asyncio.create_task(service.generate_variants(CENTER, 5.0))
        for _ in range(5):
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(run())

    assert map_service.cancelled == 2


def test_generate_response_builds_api_model():
    request = RouteRequest(center=CENTER, distance_km=5.0)

    response = asyncio.run(_service(FakeMapService(distance_km=5.0)).generate_response(request))

    assert response.success
    assert response.total_count == 2
    assert response.selected_index == 0
    assert [route.id for route in response.routes] == ["route_1", "route_2"]
    assert [route.arc_degrees for route in response.routes] == [360.0, 270.0]
    assert response.routes[0].name == "Full loop"
    assert response.routes[1].name == "270° arc loop"
    assert response.routes[0].distance_m == 5000
    assert response.criteria["distance_km"] == 5.0


def test_switch_to_selects_valid_index():
    routes = [make_route(5.0), make_route(5.2)]
    variants = RouteVariants(routes, [360.0, 270.0])

    assert variants.switch_to(1) is True
    assert variants.selected_index == 1
    assert variants.current is routes[1]


@pytest.mark.parametrize("index", [-1, 2, 10])
def test_switch_to_ignores_out_of_range_index(index):
    variants = RouteVariants([make_route(5.0), make_route(5.2)], [360.0, 270.0])

    assert variants.switch_to(index) is False
    assert variants.selected_index == 0


def test_empty_variants_have_no_current_route():
    variants = RouteVariants([], [])

    assert variants.current is None
    assert variants.switch_to(0) is False


def test_variants_require_matching_arc_spans():
    with pytest.raises(ValueError):
        RouteVariants([make_route(5.0)], [360.0, 270.0])


if __name__ == "__main__":
    pytest.main([__file__])
