"""Decoration query server: HTTP lookups plus a live staleness stream."""

from .app import create_app
from .broadcast import StaleBroadcaster

__all__ = ["create_app", "StaleBroadcaster"]
