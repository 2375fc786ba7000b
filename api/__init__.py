"""
API package for the ontology catalog FastAPI backend.

This package provides the REST API endpoints for:
- Category CRUD (categories.py)
- Dataset upload, listing and deletion (datasets.py)
- Solution CRUD (solutions.py)
- System health and error log (system.py)

Shared pieces:
- Request/response models (schemas.py)
- File intake validation and blob storage (uploads.py)
- Application settings (app_config.py)
- Request-scoped dependencies (dependencies.py)
"""
