"""Routers package."""

from . import (
    health,
    uploads,
)
