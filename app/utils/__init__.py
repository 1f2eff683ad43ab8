# app/utils/__init__.py
"""
Helpers shared across the API packages.
"""

from .datetime_utils import DateTimeUtils

__all__ = [
    'DateTimeUtils',
]
