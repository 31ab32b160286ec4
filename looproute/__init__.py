"""Closed loop route generation: waypoint rings, distance matching and polyline decoding."""

__version__ = "1.0.0"
