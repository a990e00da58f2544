"""
Request parameter and authorization construction for HTTP executors.

Parameter merge order (later steps may overwrite earlier ones):

    1. static parameters, verbatim
    2. mapped parameters: ``input key -> request key`` for inputs with a
       value (an empty or ``*`` request key means "same name")
    3. wildcard ``{"*": "*"}``: every input key not consumed yet is copied
    4. providers: for each key not consumed by 2-3, the provider's value is
       set; an existing value is only overwritten by a non-None result

A key is "consumed" once rule 2 or 3 copied it, so the wildcard never
duplicates or overwrites an explicitly mapped key.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from dyncall.calls.http.credentials import BasicCredential, Credential
from dyncall.core.logging import get_logger

logger = get_logger(__name__)

WILDCARD = "*"

ParameterProvider = Callable[[Mapping[str, str]], Any]


def _to_request_value(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass
class ParameterBuilder:
    """Builds the outgoing request parameters of one call."""

    parameters_map: Mapping[str, str | None] | None = None
    parameters_static: Mapping[str, Any] | None = None
    parameters_providers: Mapping[str, ParameterProvider] | None = None

    @property
    def is_configured(self) -> bool:
        return (
            self.parameters_map is not None
            or self.parameters_static is not None
            or self.parameters_providers is not None
        )

    def build(self, parameters: Mapping[str, Any] | None) -> dict[str, Any] | None:
        """
        Merge configuration and call parameters.

        Returns:
            The request parameters, or ``None`` when nothing is configured
            and nothing was produced.
        """
        parameters = parameters or {}
        request_parameters: dict[str, Any] = {}
        processed: set[str] = set()

        if self.parameters_static:
            for key, value in self.parameters_static.items():
                request_parameters[key] = _to_request_value(value)

        if self.parameters_map:
            for key, request_key in self.parameters_map.items():
                if key == WILDCARD:
                    continue
                if not request_key or request_key == WILDCARD:
                    request_key = key

                value = parameters.get(key)
                if value is not None:
                    request_parameters[request_key] = _to_request_value(value)
                    processed.add(key)

            if self.parameters_map.get(WILDCARD) == WILDCARD:
                for key, value in parameters.items():
                    if key in processed:
                        continue
                    request_parameters[key] = _to_request_value(value)
                    processed.add(key)

        if self.parameters_providers:
            for key, provider in self.parameters_providers.items():
                if key in processed:
                    continue
                try:
                    value = _to_request_value(provider(parameters))
                except Exception as e:
                    logger.warning(
                        "parameter_provider_failed",
                        key=key,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    continue

                if key in request_parameters:
                    if value is not None:
                        request_parameters[key] = value
                else:
                    request_parameters[key] = value

        if not request_parameters and not self.is_configured:
            return None
        return request_parameters


@dataclass
class AuthorizationBuilder:
    """
    Derives the credential of one call.

    A fixed ``authorization`` wins unconditionally. Otherwise, when
    ``authorization_fields`` is configured, its first two entries name the
    user and password parameters (defaults ``username``/``password``); both
    must be present to build a :class:`BasicCredential`.
    """

    authorization: Credential | None = None
    authorization_fields: Sequence[str | None] | None = field(default=None)

    def build(self, parameters: Mapping[str, Any] | None) -> Credential | None:
        if self.authorization is not None:
            return self.authorization

        if not self.authorization_fields:
            return None

        fields = list(self.authorization_fields)
        field_user = fields[0] or "username"
        field_pass = (fields[1] if len(fields) > 1 else None) or "password"

        parameters = parameters or {}
        user = parameters.get(field_user)
        password = parameters.get(field_pass)

        if user is not None and password is not None:
            return BasicCredential(str(user), str(password))

        return None


__all__ = ["WILDCARD", "ParameterProvider", "ParameterBuilder", "AuthorizationBuilder"]
