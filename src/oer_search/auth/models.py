"""
Authentication Models

Typed caller context produced after bearer-token verification.
"""

from typing import List
from pydantic import BaseModel, Field, ConfigDict


class ClientContext(BaseModel):
    """
    Authenticated caller derived from a verified JWT.

    Injected into the record-mutation routes.
    """

    subject: str = Field(
        ...,
        min_length=1,
        description="Service or user identity the token was issued to.",
    )

    scopes: List[str] = Field(
        default_factory=list,
        description="Scopes granted to the caller.",
    )

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=False,
        extra="forbid",
    )
