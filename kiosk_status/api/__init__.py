"""
API routers package
"""
from kiosk_status.api import (
    system,
    kiosks,
    admin
)

__all__ = [
    "system",
    "kiosks",
    "admin"
]
