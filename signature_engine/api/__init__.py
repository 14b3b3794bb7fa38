"""
HTTP API for the temporal signature engine.

BOUNDARY ENFORCEMENT:
=====================
- Translates DTOs to contracts and back; no analysis logic here
- Each app owns one engine on app.state
"""

from .server import create_app

__all__ = ['create_app']
