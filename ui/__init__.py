"""
Server-rendered catalog UI (Jinja2 templates under ``templates/``).
"""

from .views import router

__all__ = ["router"]
