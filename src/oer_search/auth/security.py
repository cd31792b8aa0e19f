"""
Bearer Tokens for Record Mutations

Search and recommendation are public. Creating, updating or deleting a
material, and reloading the language cache, require an HS256 JWT issued by
the platform:

    {"iss": <jwt_issuer>, "aud": <jwt_audience>, "iat": ..., "exp": ...,
     "sub": "<caller>", "scope": ["materials_write", ...]}

`verify_bearer_token` turns a valid token into a `ClientContext`;
`require_scopes` wraps it into a per-route dependency.
"""

from __future__ import annotations

from typing import Callable, Dict, List, NoReturn, Tuple, Type

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import settings
from .models import ClientContext

bearer_scheme = HTTPBearer(auto_error=True)

REQUIRED_CLAIMS = ["iss", "aud", "iat", "exp", "sub", "scope"]

# Checked in order; the generic InvalidTokenError must stay last.
TOKEN_ERRORS: List[Tuple[Type[jwt.InvalidTokenError], str]] = [
    (jwt.ExpiredSignatureError, "Token has expired."),
    (jwt.InvalidAudienceError, "Invalid token audience."),
    (jwt.InvalidIssuerError, "Invalid token issuer."),
    (jwt.InvalidTokenError, "Invalid or malformed token."),
]


class JWTVerificationError(RuntimeError):
    """The server cannot verify tokens at all (no secret configured)."""


def _reject(detail: str) -> NoReturn:
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _decode_token(token: str) -> Dict:
    secret = settings.jwt_secret.get_secret_value()
    if not secret:
        raise JWTVerificationError("jwt_secret is empty")

    return jwt.decode(
        token,
        secret,
        algorithms=[settings.jwt_algo],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
        options={"require": REQUIRED_CLAIMS},
    )


def verify_bearer_token(
    creds: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> ClientContext:
    """
    Decode the bearer token and build the caller context.

    Raises
    ------
    HTTPException
        401 for expired, foreign or malformed tokens and for a `scope`
        claim that is not a list; 500 when no secret is configured.
    """
    try:
        payload = _decode_token(creds.credentials)
    except JWTVerificationError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="JWT verification configuration error.",
        )
    except jwt.InvalidTokenError as exc:
        for error_type, detail in TOKEN_ERRORS:
            if isinstance(exc, error_type):
                _reject(detail)
        raise

    scopes = payload["scope"]
    if not isinstance(scopes, list):
        _reject("'scope' claim must be a list.")

    return ClientContext(subject=payload["sub"], scopes=scopes)


def require_scopes(*required_scopes: str) -> Callable[..., ClientContext]:
    """
    Build a dependency admitting only callers holding every given scope.

        @router.delete("/{material_id}")
        async def delete(client = Depends(require_scopes("materials_write"))):
            ...
    """

    def check_scopes(
        client: ClientContext = Depends(verify_bearer_token),
    ) -> ClientContext:
        missing = [scope for scope in required_scopes if scope not in client.scopes]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing required scope(s): {', '.join(missing)}",
            )
        return client

    return check_scopes
