"""
Server-rendered catalog UI.

One tab per category; the selected tab renders four independent panels
(specification, ontology graph, datasets, solutions). Mutations use
POST/redirect/GET so every page reflects the current store contents.
Selected language, solution tab, search term and toast notice travel as
query parameters and are never stored.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.app_config import AppSettings
from api.datasets import accept_upload, create_dataset_from_upload
from api.dependencies import get_blob_store, get_settings, get_store
from api.shared.logger import get_logger
from api.uploads import ALLOWED_EXTENSIONS, BlobStore, UploadRejected
from storage import CatalogStore, InvalidRecordError, StoreError

from .highlight import highlight

router = APIRouter()
logger = get_logger(__name__)

TEMPLATES = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

LANGUAGES = [
    ("sparql", "SPARQL"),
    ("python", "Python"),
    ("javascript", "JavaScript"),
    ("ros", "ROS"),
]
DEFAULT_LANGUAGE = "sparql"
DEFAULT_SOLUTION_TAB = "query"

NEW_CATEGORY_TEMPLATE = {
    "description": "A new ontology category",
    "icon": "fas fa-folder",
    "specification": {
        "definition": "New category definition",
        "coreConcepts": ["Concept 1", "Concept 2"],
        "properties": ["property1", "property2"],
    },
}

# Static entries shown by the search dialog
SEARCH_PLACEHOLDERS = [
    {"title": "Screen Element", "subtitle": "Core concept in Screen Description"},
    {"title": "Robot Agent", "subtitle": "Main entity in Robot Meet World"},
]

GRAPH_COLORS = ["#f97316", "#a855f7", "#22c55e", "#ef4444"]
MAX_GRAPH_SATELLITES = 4


# ============= Presentation helpers =============


def format_time_ago(moment: datetime, now: Optional[datetime] = None) -> str:
    """Relative "Updated ..." label used in the dataset list."""
    now = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    hours = int((now - moment).total_seconds() // 3600)

    if hours < 1:
        return "Updated less than an hour ago"
    if hours == 1:
        return "Updated 1 hour ago"
    if hours < 24:
        return f"Updated {hours} hours ago"
    days = hours // 24
    if days == 1:
        return "Updated 1 day ago"
    return f"Updated {days} days ago"


def solution_tabs(category: Dict[str, Any]) -> List[tuple]:
    implementation = "ROS Integration" if "robot" in category["name"].lower() else "Implementation"
    return [
        ("query", "Query Examples"),
        ("implementation", implementation),
        ("documentation", "Documentation"),
    ]


def pick_solution(solutions: List[Dict[str, Any]], language: str, tab: str) -> Optional[Dict[str, Any]]:
    """First solution matching (language, type); duplicates are legal."""
    return next((s for s in solutions if s["language"] == language and s["type"] == tab), None)


def graph_layout(category: Dict[str, Any]) -> Dict[str, Any]:
    """Decorative diagram: the category in the middle, core concepts around it."""
    concepts = category["specification"].get("coreConcepts", [])[:MAX_GRAPH_SATELLITES]
    count = len(concepts)
    satellites = []
    for i, label in enumerate(concepts):
        x = round((i + 1) * 100 / (count + 1), 1)
        satellites.append({"label": label, "x": x, "color": GRAPH_COLORS[i % len(GRAPH_COLORS)]})
    return {"center": category["name"], "satellites": satellites}


def unique_category_name(existing: List[str], base: str = "New Category") -> str:
    taken = set(existing)
    if base not in taken:
        return base
    n = 2
    while f"{base} {n}" in taken:
        n += 1
    return f"{base} {n}"


def _load_panel(loader: Callable[[], Any], label: str) -> Dict[str, Any]:
    """Run one panel's fetch; a failure only affects that panel."""
    try:
        return {"data": loader(), "error": None}
    except StoreError as e:
        logger.error("Failed to load %s: %s", label, e)
        return {"data": None, "error": f"Failed to load {label}"}


def _redirect(path: str, notice: Optional[str] = None, level: str = "success", **params: str) -> RedirectResponse:
    query = {k: v for k, v in params.items() if v}
    if notice:
        query.update({"notice": notice, "level": level})
    url = f"{path}?{urlencode(query)}" if query else path
    return RedirectResponse(url=url, status_code=303)


def _render_catalog(
    request: Request,
    store: CatalogStore,
    selected_id: Optional[str],
    language: str,
    tab: str,
    q: Optional[str],
    notice: Optional[str],
    level: str,
):
    categories_panel = _load_panel(store.list_categories, "categories")
    categories = categories_panel["data"] or []

    selected = None
    if selected_id is not None:
        selected = next((c for c in categories if c["id"] == selected_id), None)
        if selected is None and categories_panel["error"] is None:
            return TEMPLATES.TemplateResponse(
                request, "not_found.html", {"message": "Category not found"}, status_code=404
            )
    elif categories:
        selected = categories[0]

    context: Dict[str, Any] = {
        "categories": categories,
        "categories_error": categories_panel["error"],
        "selected": selected,
        "language": language,
        "languages": LANGUAGES,
        "tab": tab,
        "search_term": q,
        "search_open": q is not None,
        "search_results": SEARCH_PLACEHOLDERS,
        "notice": notice,
        "level": level if level in ("success", "error") else "success",
        "accept": ",".join(ALLOWED_EXTENSIONS),
        "blob_storage": get_blob_store(request) is not None,
        "dataset_counts": {},
    }

    for category in categories:
        counts = _load_panel(lambda cid=category["id"]: len(store.list_datasets(cid)), "dataset counts")
        context["dataset_counts"][category["id"]] = counts["data"]

    if selected is not None:
        datasets = _load_panel(lambda: store.list_datasets(selected["id"]), "datasets")
        solutions = _load_panel(lambda: store.list_solutions(selected["id"]), "solutions")
        current = pick_solution(solutions["data"], language, tab) if solutions["data"] is not None else None
        context.update({
            "graph": graph_layout(selected),
            "datasets": datasets,
            "solutions": solutions,
            "current_solution": current,
            "current_code": highlight(current["code"], language) if current else None,
            "solution_tabs": solution_tabs(selected),
        })

    return TEMPLATES.TemplateResponse(request, "index.html", context)


TEMPLATES.env.filters["time_ago"] = format_time_ago


# ============= Routes =============


@router.get("/", response_class=HTMLResponse)
async def catalog_home(
    request: Request,
    language: str = DEFAULT_LANGUAGE,
    tab: str = DEFAULT_SOLUTION_TAB,
    q: Optional[str] = None,
    notice: Optional[str] = None,
    level: str = "success",
    store: CatalogStore = Depends(get_store),
):
    """Catalog page with the first category selected (or the empty state)."""
    return _render_catalog(request, store, None, language, tab, q, notice, level)


@router.get("/categories/{category_id}", response_class=HTMLResponse)
async def catalog_category(
    request: Request,
    category_id: str,
    language: str = DEFAULT_LANGUAGE,
    tab: str = DEFAULT_SOLUTION_TAB,
    q: Optional[str] = None,
    notice: Optional[str] = None,
    level: str = "success",
    store: CatalogStore = Depends(get_store),
):
    return _render_catalog(request, store, category_id, language, tab, q, notice, level)


@router.post("/categories")
async def add_category(store: CatalogStore = Depends(get_store)):
    """Create a placeholder category and open its tab."""
    try:
        names = [c["name"] for c in store.list_categories()]
        category = store.create_category({"name": unique_category_name(names), **NEW_CATEGORY_TEMPLATE})
    except StoreError as e:
        logger.error("Failed to create category from UI: %s", e)
        return _redirect("/", "Failed to create category", "error")
    return _redirect(f"/categories/{category['id']}", "Category created successfully")


@router.post("/categories/{category_id}/datasets")
async def upload_dataset_form(
    request: Request,
    category_id: str,
    store: CatalogStore = Depends(get_store),
    settings: AppSettings = Depends(get_settings),
    blobs: Optional[BlobStore] = Depends(get_blob_store),
):
    target = f"/categories/{category_id}"
    try:
        filename, content = await accept_upload(request, settings)
        await create_dataset_from_upload(category_id, filename, content, store, blobs)
    except (UploadRejected, InvalidRecordError, StarletteHTTPException) as e:
        # request.form() raises HTTPException(400) for a refused multipart body
        logger.warning("UI upload rejected for category %s: %s", category_id, e)
        return _redirect(target, "Failed to upload dataset", "error")
    return _redirect(target, "Dataset uploaded successfully")


@router.post("/datasets/{dataset_id}/delete")
async def delete_dataset_form(
    dataset_id: str,
    store: CatalogStore = Depends(get_store),
    blobs: Optional[BlobStore] = Depends(get_blob_store),
):
    dataset = store.get_dataset(dataset_id)
    if dataset is None:
        return _redirect("/", "Failed to delete dataset", "error")
    target = f"/categories/{dataset['category_id']}"
    if not store.delete_dataset(dataset_id):
        return _redirect(target, "Failed to delete dataset", "error")
    if blobs is not None:
        blobs.delete(dataset_id)
    return _redirect(target, "Dataset deleted successfully")
