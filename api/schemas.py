from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class ViewStateModel(BaseModel):
    page: str = "dashboard"
    query: str = ""
    program: str = "all"
    scholarship: str = "all"
    advisor: Optional[str] = None
    current_page: int = 1
    advisor_query: str = ""
    stats_program: str = "all"


class MetaListResponse(BaseModel):
    values: List[str] = Field(default_factory=list)


class LoadStatusResponse(BaseModel):
    status: str
    message: str = ""
    record_count: int = 0
    error_type: Optional[str] = None
    version: int = 0
    loaded_at: Optional[str] = None
