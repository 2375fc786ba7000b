"""Solution API routes (example code attached to a category)."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from storage import CatalogStore, InvalidRecordError, StoreUnavailableError

from .dependencies import get_store
from .schemas import Solution, SolutionCreate, SolutionUpdate
from .shared.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/categories/{category_id}/solutions", response_model=List[Solution])
async def list_solutions(category_id: str, store: CatalogStore = Depends(get_store)):
    try:
        return store.list_solutions(category_id)
    except StoreUnavailableError:
        raise HTTPException(status_code=500, detail="Failed to fetch solutions")


@router.post("/categories/{category_id}/solutions", response_model=Solution, status_code=201)
async def create_solution(category_id: str, body: SolutionCreate, store: CatalogStore = Depends(get_store)):
    """Create a solution; the category always comes from the path."""
    fields = body.model_dump()
    fields["category_id"] = category_id
    try:
        return store.create_solution(fields)
    except InvalidRecordError as e:
        logger.warning("Rejected solution for category %s: %s", category_id, e)
        raise HTTPException(status_code=400, detail="Invalid solution data")


@router.get("/solutions/{solution_id}", response_model=Solution)
async def get_solution(solution_id: str, store: CatalogStore = Depends(get_store)):
    try:
        solution = store.get_solution(solution_id)
    except StoreUnavailableError:
        raise HTTPException(status_code=500, detail="Failed to fetch solution")
    if solution is None:
        raise HTTPException(status_code=404, detail="Solution not found")
    return solution


@router.put("/solutions/{solution_id}", response_model=Solution)
async def update_solution(solution_id: str, body: SolutionUpdate, store: CatalogStore = Depends(get_store)):
    try:
        solution = store.update_solution(solution_id, body.model_dump(exclude_unset=True, exclude_none=True))
    except InvalidRecordError as e:
        logger.warning("Rejected solution update %s: %s", solution_id, e)
        raise HTTPException(status_code=400, detail="Invalid solution data")
    if solution is None:
        raise HTTPException(status_code=404, detail="Solution not found")
    return solution


@router.delete("/solutions/{solution_id}", status_code=204)
async def delete_solution(solution_id: str, store: CatalogStore = Depends(get_store)):
    try:
        deleted = store.delete_solution(solution_id)
    except StoreUnavailableError:
        raise HTTPException(status_code=500, detail="Failed to delete solution")
    if not deleted:
        raise HTTPException(status_code=404, detail="Solution not found")
    return Response(status_code=204)
