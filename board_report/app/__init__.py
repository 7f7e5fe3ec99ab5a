"""HTTP endpoint for the board report."""

from .main import create_app

__all__ = ["create_app"]
