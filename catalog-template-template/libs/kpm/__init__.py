"""
KPM Libraries

Client for the kpm bundle and catalog builder.
"""

from .client import KPMClient

__all__ = [
    'KPMClient'
]
