"""
API routers.
"""

from bulletin_archiver.routers.archival import router as archival_router

__all__ = [
    "archival_router",
]
