"""
Credentials carried by HTTP requests.

Only credential *carrying* lives here: a credential renders the value of the
``Authorization`` header. Obtaining one (login flows) is up to the backend;
see :mod:`dyncall.calls.http.interceptors` for installing a credential
extracted from a response.
"""

from __future__ import annotations

import base64
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

DEFAULT_TOKEN_FIELDS: tuple[str, ...] = (
    "access_token",
    "accessToken",
    "token",
    "bearer",
    "id_token",
)


class Credential(ABC):
    """Authorization material for a request."""

    @property
    @abstractmethod
    def scheme(self) -> str: ...

    @abstractmethod
    def header_value(self) -> str:
        """Value of the ``Authorization`` header."""
        ...


@dataclass(frozen=True)
class BasicCredential(Credential):
    """``Basic`` user/password credential."""

    username: str
    password: str

    @property
    def scheme(self) -> str:
        return "Basic"

    def header_value(self) -> str:
        raw = f"{self.username}:{self.password}".encode("utf-8")
        return f"Basic {base64.b64encode(raw).decode('ascii')}"

    def __repr__(self) -> str:
        return f"BasicCredential(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class BearerCredential(Credential):
    """``Bearer`` token credential."""

    token: str

    @property
    def scheme(self) -> str:
        return "Bearer"

    def header_value(self) -> str:
        return f"Bearer {self.token}"

    def __repr__(self) -> str:
        return "BearerCredential(token='***')"


def credential_from_json(
    value: Any,
    token_fields: Sequence[str] = DEFAULT_TOKEN_FIELDS,
) -> Credential | None:
    """
    Extract a bearer credential from a parsed JSON response.

    Looks for the first non-empty string among ``token_fields``, at the top
    level and then one level down (``{"data": {"token": ...}}``). A bare
    JSON string is not treated as a token.
    """
    if not isinstance(value, Mapping):
        return None

    token = _find_token(value, token_fields)
    if token is None:
        for nested in value.values():
            if isinstance(nested, Mapping):
                token = _find_token(nested, token_fields)
                if token is not None:
                    break

    return BearerCredential(token) if token is not None else None


def _find_token(value: Mapping[str, Any], token_fields: Sequence[str]) -> str | None:
    for field_name in token_fields:
        token = value.get(field_name)
        if isinstance(token, str) and token.strip():
            return token.strip()
    return None


__all__ = [
    "Credential",
    "BasicCredential",
    "BearerCredential",
    "DEFAULT_TOKEN_FIELDS",
    "credential_from_json",
]
