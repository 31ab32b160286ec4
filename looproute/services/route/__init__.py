# Route service package
from .distance_matcher import DistanceMatcher
from .response_builder import ResponseBuilderService
from .ring_generator import generate_circular_waypoints
from .route_builder import RouteBuilder



__all__ = [
    "DistanceMatcher",
    "ResponseBuilderService",
    "RouteBuilder",
    "generate_circular_waypoints",
    ]
