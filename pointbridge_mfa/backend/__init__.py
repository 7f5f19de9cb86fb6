"""
Backend package: Flask HTTP adapter over the MFA engine.
"""

from .app import create_app

__all__ = ["create_app"]
