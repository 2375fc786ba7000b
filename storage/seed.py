"""Demo catalog content loaded into an empty store on startup."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from api.shared.logger import get_logger

from .base import CatalogStore, utcnow

logger = get_logger(__name__)

SCREEN_DESCRIPTION_QUERY = """\
# SPARQL Query Example
PREFIX ui: <http://example.org/ui#>
PREFIX rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#>

SELECT ?element ?type ?position
WHERE {
  ?element rdf:type ?type .
  ?element ui:hasPosition ?position .
  FILTER(?type = ui:Button)
}"""

ROBOT_ACTION_QUERY = """\
# Robot Action Query
PREFIX robot: <http://example.org/robot#>
PREFIX geo: <http://www.w3.org/2003/01/geo/wgs84_pos#>

SELECT ?robot ?action ?object
WHERE {
  ?robot robot:canPerform ?action .
  ?action robot:appliesTo ?object .
  ?robot geo:location ?location .
}"""

DEMO_CATALOG: list[dict[str, Any]] = [
    {
        "category": {
            "name": "Screen Description",
            "description": (
                "Screen description ontology focuses on the semantic representation of visual "
                "interface elements and their relationships within digital environments."
            ),
            "icon": "fas fa-desktop",
            "specification": {
                "definition": (
                    "Screen description ontology focuses on the semantic representation of visual "
                    "interface elements and their relationships within digital environments."
                ),
                "coreConcepts": ["Visual Elements", "Layout Structure", "Interaction Patterns", "Accessibility"],
                "properties": ["hasComponent", "containsElement", "hasPosition", "hasSize", "hasColor"],
            },
        },
        "datasets": [
            ("screen_elements.owl", "2.4 MB", timedelta(hours=2)),
            ("ui_components.rdf", "1.8 MB", timedelta(days=1)),
        ],
        "solutions": [
            {"title": "SPARQL Query Example", "language": "sparql", "code": SCREEN_DESCRIPTION_QUERY, "type": "query"},
        ],
    },
    {
        "category": {
            "name": "Robot Meet World",
            "description": (
                "Robot Meet World ontology defines the semantic relationships between robotic "
                "systems and their physical environment interactions."
            ),
            "icon": "fas fa-robot",
            "specification": {
                "definition": (
                    "Robot Meet World ontology defines the semantic relationships between robotic "
                    "systems and their physical environment interactions."
                ),
                "coreConcepts": ["Robot Agents", "Physical Objects", "Environment", "Actions", "Sensors"],
                "properties": ["canPerform", "hasLocation", "interactsWith", "hasCapability", "observes"],
            },
        },
        "datasets": [
            ("robot_actions.owl", "3.2 MB", timedelta(hours=4)),
            ("environment_model.rdf", "5.1 MB", timedelta(hours=6)),
        ],
        "solutions": [
            {"title": "Robot Action Query", "language": "sparql", "code": ROBOT_ACTION_QUERY, "type": "query"},
        ],
    },
]


def seed_demo_catalog(store: CatalogStore) -> bool:
    """Populate ``store`` with the demo catalog if it has no categories.

    Returns:
        True if demo content was written.
    """
    if store.list_categories():
        logger.info("Catalog already populated, skipping demo data")
        return False

    now = utcnow()
    for entry in DEMO_CATALOG:
        category = store.create_category(entry["category"])
        for filename, size, age in entry["datasets"]:
            store.create_dataset({
                "category_id": category["id"],
                "name": filename,
                "filename": filename,
                "size": size,
                "uploaded_at": now - age,
            })
        for solution in entry["solutions"]:
            store.create_solution({**solution, "category_id": category["id"]})

    logger.info("Seeded demo catalog with %d categories", len(DEMO_CATALOG))
    return True
