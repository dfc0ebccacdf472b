from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

__all__ = [
    "RegionSuccess",
    "RegionFailure",
    "RegionOutcome",
]


class RegionSuccess(BaseModel):
    """A partner call for one region that returned 2xx."""

    status: Literal["fulfilled"] = "fulfilled"
    region: str
    url: str
    data: Any = None


class RegionFailure(BaseModel):
    """A partner call for one region that failed or could not be made."""

    status: Literal["rejected"] = "rejected"
    region: str
    error: str


RegionOutcome = Annotated[Union[RegionSuccess, RegionFailure], Field(discriminator="status")]
