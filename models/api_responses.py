"""
API Response Models for mutation endpoints.

Every POST/PUT answers with a JSON object whose `message` is shown to the
user. Anything else in the object is kept for callers that need it.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class MutationResult(BaseModel):
    """Response of a POST or PUT."""
    model_config = ConfigDict(extra="allow")

    message: Optional[str] = Field(None, description="User-facing feedback")
    id: Optional[Union[int, str]] = Field(None, description="Id of the created record, when the backend sends it")
