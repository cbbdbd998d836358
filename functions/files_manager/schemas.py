"""
Pydantic schemas for the files manager API.
"""

from __future__ import annotations

from pydantic import BaseModel


class StatusResponse(BaseModel):
    redis: bool
    db: bool


class StatsResponse(BaseModel):
    users: int
    files: int
