"""
app/api/routers package marker.
"""

from app.api.routers.segmentation import router as segmentation_router

__all__ = [
    "segmentation_router",
]
