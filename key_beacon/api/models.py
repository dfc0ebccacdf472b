from __future__ import annotations

from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict


def _scalar_to_str(value: Any) -> Any:
    # Numbers are accepted where text is expected; objects and lists are not.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


Text = Annotated[Optional[str], BeforeValidator(_scalar_to_str)]


class TokenRequest(BaseModel):
    """Client credentials posted to /get-token (camelCase, as the page sends them)."""

    model_config = ConfigDict(extra="ignore")

    clientId: Text = None
    clientSecret: Text = None


class DomainRequest(BaseModel):
    """Inputs for /register and /verify.

    `regions` entries are left untyped: an entry that is not a known region
    code fails for that region only.
    """

    model_config = ConfigDict(extra="ignore")

    domain: Text = None
    token: Text = None
    regions: Optional[list[Any]] = None
