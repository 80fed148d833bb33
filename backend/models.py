from __future__ import annotations

from pydantic import BaseModel
from typing import Optional

"""
Pydantic models for request/response validation
"""

class HealthResponse(BaseModel):
    status: str
    version: str = "0.1.0"
    languages: list[str] = []

class RunRequest(BaseModel):
    # Optional so a missing field yields the 400 body instead of a 422
    language: Optional[str] = None
    code: Optional[str] = None
    inputData: Optional[str] = None

class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
