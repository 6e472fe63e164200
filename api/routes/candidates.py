"""
Candidate archive routes for the interviewer view.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.dependencies import get_controller
from controller import InterviewController
from dashboard import DEFAULT_SORT, dashboard_stats, process_candidates
from state import CandidateResult

router = APIRouter(prefix="/api/candidates", tags=["candidates"])


class CandidateStats(BaseModel):
    total: int
    average_score: float
    passed: int


class CandidateListResponse(BaseModel):
    candidates: List[CandidateResult]
    stats: CandidateStats


@router.get("", response_model=CandidateListResponse)
async def list_candidates(
    search: str = "",
    sort: str = DEFAULT_SORT,
    controller: InterviewController = Depends(get_controller),
):
    """List archived results, filtered and sorted. Stats cover the whole archive."""
    results = controller.persistence.load_results()
    return CandidateListResponse(
        candidates=process_candidates(results, search, sort),
        stats=CandidateStats(**dashboard_stats(results)),
    )


@router.get("/{result_id}", response_model=CandidateResult)
async def get_candidate(
    result_id: str,
    controller: InterviewController = Depends(get_controller),
):
    result = controller.persistence.get_result(result_id)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Candidate '{result_id}' not found")
    return result
