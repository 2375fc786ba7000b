"""
Integration tests for the ontology catalog.

These tests drive the complete application (REST API, UI forms and the
DuckDB store on disk) the way a browser session would.

Test modules:
- test_catalog_flow.py: end-to-end curation session against DuckDB

Run all integration tests:
    pytest tests/integration/ -v

Skip them (they are marked slow):
    pytest -m "not slow"
"""
