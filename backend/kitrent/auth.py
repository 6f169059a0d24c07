# backend/kitrent/auth.py
"""
Caller identity and admin checks.

Authentication happens upstream: the gateway forwards the verified caller
as the `X-Client-Ref` header. Admin rights come from an injected
AuthorizationProvider, overridable per app / test.
"""

from functools import lru_cache
from typing import Protocol

from fastapi import Depends, Header, HTTPException, status

from .config import settings


class AuthorizationProvider(Protocol):
    def is_admin(self, client_ref: str) -> bool: ...


class StaticAuthorizationProvider:
    """Admin list fixed at construction (from settings by default)."""

    def __init__(self, admin_refs: frozenset[str] | set[str]):
        self.admin_refs = frozenset(admin_refs)

    def is_admin(self, client_ref: str) -> bool:
        return client_ref in self.admin_refs


@lru_cache
def get_authorization_provider() -> AuthorizationProvider:
    return StaticAuthorizationProvider(settings.admin_refs)


def get_client_ref(x_client_ref: str | None = Header(None)) -> str:
    if not x_client_ref:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not authenticated",
        )
    return x_client_ref


def require_admin(
    client_ref: str = Depends(get_client_ref),
    authz: AuthorizationProvider = Depends(get_authorization_provider),
) -> str:
    if not authz.is_admin(client_ref):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return client_ref
