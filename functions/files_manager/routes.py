"""
HTTP routes for the files manager API.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from files_manager.dependencies import get_status_reporter
from files_manager.schemas import StatsResponse, StatusResponse
from files_manager.status import StatusReporter

router = APIRouter()


@router.get("/status", response_model=StatusResponse)
def get_status(reporter: StatusReporter = Depends(get_status_reporter)):
    """Liveness of the cache and the document store."""
    return reporter.get_status()


@router.get("/stats", response_model=StatsResponse)
def get_stats(reporter: StatusReporter = Depends(get_status_reporter)):
    """Number of users and files in the document store."""
    return reporter.get_stats()
