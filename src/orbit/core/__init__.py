"""
Core module - configuration, logging, runtime wiring.

Components:
- config: Settings management via pydantic-settings
- logging: Structured logging setup
- context: Explicit construction and teardown of the SDK components
"""

from orbit.core.config import Settings

__all__ = ["Settings"]
