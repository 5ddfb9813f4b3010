"""Pydantic request schemas for the daemon API."""

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    query: str = Field(..., max_length=4096)


class PushRequest(BaseModel):
    path: str = Field(..., min_length=1, max_length=4096)
