"""
Utility modules for the speech therapy backend.

This package contains shared helpers used across the application,
including datetime utilities and request validators.
"""

from utils.datetime_utils import utc_now, ensure_utc

__all__ = ['utc_now', 'ensure_utc']
