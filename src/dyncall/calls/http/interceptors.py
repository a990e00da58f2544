"""
Output interceptors.

An interceptor observes every response an HTTP executor resolves - valid or
rejected by the validator, with or without content - and receives::

    interceptor(executor, output, valid, filtered_output,
                call_parameters, request_parameters)

Exceptions raised by an interceptor are logged and dropped.

The canonical interceptor is :class:`CredentialInterceptor`: after a valid
login response it extracts a credential and installs it on the executor so
later calls through the same executor (and its HTTP client) are
authenticated without the caller passing it again.

Usage:
    login = factory.create(
        HttpMethod.POST,
        path="login",
        authorization_fields=["username", "password"],
        output_interceptor=CredentialInterceptor(),
    )
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

from dyncall.calls.http.credentials import DEFAULT_TOKEN_FIELDS, Credential, credential_from_json
from dyncall.core.errors import InterceptorError
from dyncall.core.logging import get_logger

if TYPE_CHECKING:
    from dyncall.calls.executors import Executor

logger = get_logger(__name__)


class OutputInterceptor(Protocol):
    def __call__(
        self,
        executor: Executor[Any],
        output: str | None,
        valid: bool,
        filtered_output: str | None,
        call_parameters: Mapping[str, Any],
        request_parameters: Mapping[str, Any] | None,
    ) -> None: ...


CredentialParser = Callable[[str], "Credential | None"]


def invoke_interceptor(
    interceptor: OutputInterceptor | None,
    executor: Executor[Any],
    output: str | None,
    valid: bool,
    filtered_output: str | None,
    call_parameters: Mapping[str, Any],
    request_parameters: Mapping[str, Any] | None,
) -> None:
    """Run ``interceptor``, logging instead of raising on failure."""
    if interceptor is None:
        return
    try:
        interceptor(executor, output, valid, filtered_output, call_parameters, request_parameters)
    except Exception as e:
        error = InterceptorError(f"Output interceptor failed: {e}", cause=e).with_context(executor=repr(executor))
        logger.warning("output_interceptor_failed", **error.to_dict())


class CredentialInterceptor:
    """
    Installs a credential parsed from a valid response.

    Args:
        parser: Custom ``output -> Credential | None``. By default the
            output is parsed as JSON and a bearer token is looked up in
            ``token_fields``.
        token_fields: Field names tried by the default parser
        use_filtered_output: Parse the filtered output instead of the
            original one
    """

    def __init__(
        self,
        parser: CredentialParser | None = None,
        *,
        token_fields: Sequence[str] = DEFAULT_TOKEN_FIELDS,
        use_filtered_output: bool = False,
    ):
        self.parser = parser
        self.token_fields = tuple(token_fields)
        self.use_filtered_output = use_filtered_output

    def parse(self, output: str | None) -> Credential | None:
        if output is None:
            return None
        if self.parser is not None:
            return self.parser(output)
        try:
            value = json.loads(output)
        except ValueError:
            return None
        return credential_from_json(value, self.token_fields)

    def __call__(
        self,
        executor: Executor[Any],
        output: str | None,
        valid: bool,
        filtered_output: str | None,
        call_parameters: Mapping[str, Any],
        request_parameters: Mapping[str, Any] | None,
    ) -> None:
        if not valid:
            return

        credential = self.parse(filtered_output if self.use_filtered_output else output)
        if credential is None:
            return

        executor.authorization = credential
        logger.info("credential_installed", executor=repr(executor), scheme=credential.scheme)


class InterceptorChain:
    """Runs several interceptors in order; one failing does not stop the rest."""

    def __init__(self, *interceptors: OutputInterceptor):
        self.interceptors = list(interceptors)

    def __call__(self, executor, output, valid, filtered_output, call_parameters, request_parameters) -> None:
        for interceptor in self.interceptors:
            invoke_interceptor(
                interceptor,
                executor,
                output,
                valid,
                filtered_output,
                call_parameters,
                request_parameters,
            )


__all__ = [
    "OutputInterceptor",
    "CredentialParser",
    "CredentialInterceptor",
    "InterceptorChain",
    "invoke_interceptor",
]
