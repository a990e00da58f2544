"""
HTTP executor - the call execution engine.

One logical call runs through a small state machine:

    ::

        NOT_STARTED ──► SENDING ──┬──► SUCCEEDED        (response, NO_CONTENT)
                          ▲       ├──► RETRYING ──┐    (RETRY, budget left)
                          └───────┼───────────────┘
                                  └──► FAILED_TERMINAL  (ERROR, RETRY exhausted)

Pipeline of one call:
    1. build request parameters, credential, body and content type
    2. send; a transport failure is classified by ``on_http_error``
       (default: 404 -> NO_CONTENT, other status errors -> RETRY,
       anything else -> ERROR)
    3. RETRY waits a tiered backoff and sends again while the retry budget
       lasts; retries only happen when the DynCall allows them *and*
       ``error_max_retries`` > 0
    4. a response (or NO_CONTENT, as an absent body) is validated,
       filtered and coerced to the DynCall's output kind; the output
       interceptor sees it either way
    5. ERROR, or RETRY once retries are exhausted/disabled, resolves to
       ``error_response`` coerced to the output kind

Transport failures never reach the caller. Coercion failures of a received
body always do.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from dyncall.calls.executors import Executor
from dyncall.calls.http.body import BodyBuilder, build_body, resolve_body_type
from dyncall.calls.http.client import HttpClient, HttpMethod, HttpResponse
from dyncall.calls.http.credentials import Credential
from dyncall.calls.http.interceptors import OutputInterceptor, invoke_interceptor
from dyncall.calls.http.params import AuthorizationBuilder, ParameterBuilder, ParameterProvider
from dyncall.core.errors import HttpError, InvalidConfigError, categorize_error, is_retryable
from dyncall.core.logging import get_logger
from dyncall.core.output import OutputKind, parse_json
from dyncall.core.patterns import has_pattern, render_pattern, render_pattern_json
from dyncall.core.result import Err, Ok, Result
from dyncall.core.retry import CallAttempt, NoRetry, RetryStrategy, TieredBackoff

if TYPE_CHECKING:
    from dyncall.calls.call import DynCall

logger = get_logger(__name__)


class OnHttpErrorAnswer(str, Enum):
    """How a transport failure is resolved."""

    NO_CONTENT = "no_content"
    RETRY = "retry"
    ERROR = "error"


OnHttpError = Callable[["HttpError | None"], OnHttpErrorAnswer]
OutputValidator = Callable[[str | None, Mapping[str, Any], "Mapping[str, Any] | None"], bool]
OutputFilterFn = Callable[[str | None, Mapping[str, Any], "Mapping[str, Any] | None"], "str | None"]
JsonOutputFilter = Callable[[Any, Mapping[str, Any], "Mapping[str, Any] | None"], Any]


def default_on_http_error(error: HttpError | None) -> OnHttpErrorAnswer:
    """Default transport failure classification."""
    if error is None:
        return OnHttpErrorAnswer.ERROR
    if error.is_status_not_found:
        return OnHttpErrorAnswer.NO_CONTENT
    if error.is_status_error:
        return OnHttpErrorAnswer.RETRY
    return OnHttpErrorAnswer.ERROR


@dataclass
class HttpExecutorConfig:
    """Declarative configuration of an :class:`HttpExecutor`."""

    method: HttpMethod = HttpMethod.GET
    path: str | None = None
    full_path: bool = False

    parameters_map: Mapping[str, str | None] | None = None
    parameters_static: Mapping[str, Any] | None = None
    parameters_providers: Mapping[str, ParameterProvider] | None = None
    query_string: str | None = None

    authorization: Credential | None = None
    authorization_fields: Sequence[str | None] | None = None

    body: Any = None
    body_builder: BodyBuilder | None = None
    body_type: str | None = None

    output_validator: OutputValidator | None = None
    output_filter: OutputFilterFn | None = None
    json_output_filter: JsonOutputFilter | None = None
    output_filter_pattern: str | None = None
    output_interceptor: OutputInterceptor | None = None

    error_response: Any = None
    error_max_retries: int | None = None
    on_http_error: OnHttpError | None = None

    def __post_init__(self) -> None:
        self.method = HttpMethod.parse(self.method)
        if self.body_builder is not None and not isinstance(self.body_builder, BodyBuilder):
            raise InvalidConfigError(
                "body_builder",
                self.body_builder,
                "body_builder must be a BodyBuilder (BodyBuilder.pattern/producer/function)",
            )


@dataclass(frozen=True)
class _Request:
    method: HttpMethod
    path: str | None
    full_path: bool
    authorization: Credential | None
    query_parameters: Mapping[str, Any] | None
    query_string: str | None
    body: Any
    content_type: str | None


@dataclass
class CallTrace:
    """What happened during one call (for diagnostics and tests)."""

    attempts: int = 0
    errors: list[Exception] = field(default_factory=list)
    answer: OnHttpErrorAnswer | None = None
    state: str | None = None


class HttpExecutor(Executor[Any]):
    """
    Executes DynCalls as HTTP requests.

    Args:
        http_client: Transport (shared between executors is fine)
        method: HTTP method
        path: Request path, may contain ``{{var}}`` placeholders
        retry_strategy: Backoff policy (default: tiered, from settings)
        **config: Any :class:`HttpExecutorConfig` field
    """

    def __init__(
        self,
        http_client: HttpClient,
        method: HttpMethod | str = HttpMethod.GET,
        path: str | None = None,
        *,
        retry_strategy: RetryStrategy | None = None,
        config: HttpExecutorConfig | None = None,
        **options: Any,
    ):
        super().__init__()
        if config is None:
            config = HttpExecutorConfig(method=method, path=path, **options)
        elif options:
            raise InvalidConfigError("options", sorted(options), "Pass either config or options, not both")

        self.http_client = http_client
        self.config = config
        self.retry_strategy = retry_strategy or TieredBackoff.from_settings()
        self.parameter_builder = ParameterBuilder(
            parameters_map=config.parameters_map,
            parameters_static=config.parameters_static,
            parameters_providers=config.parameters_providers,
        )
        self.authorization_builder = AuthorizationBuilder(
            authorization=config.authorization,
            authorization_fields=config.authorization_fields,
        )
        self.last_trace = CallTrace()

    # ------------------------------------------------------------------ #
    # Authorization
    # ------------------------------------------------------------------ #

    @property
    def authorization(self) -> Credential | None:
        return self.authorization_builder.authorization

    @authorization.setter
    def authorization(self, credential: Credential | None) -> None:
        self.authorization_builder.authorization = credential
        self.config.authorization = credential
        self.http_client.authorization = credential

    # ------------------------------------------------------------------ #
    # Configuration accessors
    # ------------------------------------------------------------------ #

    @property
    def method(self) -> HttpMethod:
        return self.config.method

    @property
    def path(self) -> str | None:
        return self.config.path

    @property
    def max_retries(self) -> int:
        max_retries = self.config.error_max_retries
        if max_retries is None:
            from dyncall.core.settings import get_settings

            max_retries = get_settings().error_max_retries
        return max_retries if max_retries > 0 else 0

    # ------------------------------------------------------------------ #
    # Request building
    # ------------------------------------------------------------------ #

    def build_parameters(self, parameters: Mapping[str, Any] | None) -> dict[str, Any] | None:
        return self.parameter_builder.build(parameters)

    def build_authorization(self, parameters: Mapping[str, Any] | None) -> Credential | None:
        return self.authorization_builder.build(parameters)

    def build_body(
        self,
        parameters: Mapping[str, Any] | None,
        request_parameters: Mapping[str, Any] | None,
    ) -> Any:
        return build_body(self.config.body, self.config.body_builder, parameters, request_parameters)

    def build_path(
        self,
        parameters: Mapping[str, Any] | None,
        request_parameters: Mapping[str, Any] | None,
    ) -> str | None:
        path = self.config.path
        if has_pattern(path):
            return render_pattern(path, parameters, request_parameters)
        return path

    def build_query_string(
        self,
        parameters: Mapping[str, Any] | None,
        request_parameters: Mapping[str, Any] | None,
    ) -> str | None:
        query_string = self.config.query_string
        if has_pattern(query_string):
            return render_pattern(query_string, parameters, request_parameters)
        return query_string

    def _build_request(self, parameters: Mapping[str, Any]) -> tuple[_Request, dict[str, Any] | None]:
        request_parameters = self.build_parameters(parameters)
        body = self.build_body(parameters, request_parameters)
        request = _Request(
            method=self.config.method,
            path=self.build_path(parameters, request_parameters),
            full_path=self.config.full_path,
            authorization=self.build_authorization(parameters),
            query_parameters=request_parameters,
            query_string=self.build_query_string(parameters, request_parameters),
            body=body,
            content_type=resolve_body_type(self.config.body_type, body),
        )
        return request, request_parameters

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #

    async def call(self, dyn_call: DynCall[Any, Any], parameters: Mapping[str, Any]) -> Any:
        result, _ = await self.call_traced(dyn_call, parameters)
        return result

    async def call_traced(
        self, dyn_call: DynCall[Any, Any], parameters: Mapping[str, Any]
    ) -> tuple[Any, CallTrace]:
        """
        Like :meth:`call`, also returning the trace of this call.

        ``last_trace`` only reflects whichever call started last, so concurrent
        callers sharing an executor should read the returned trace instead.
        """
        parameters = dict(parameters or {})
        request, request_parameters = self._build_request(parameters)

        max_retries = self.max_retries
        retries_enabled = max_retries > 0 and dyn_call.allow_retries
        attempt = CallAttempt(
            strategy=self.retry_strategy if retries_enabled else NoRetry(),
            max_retries=max_retries if retries_enabled else 0,
        )
        trace = CallTrace()
        self.last_trace = trace

        while True:
            attempt.start_sending()
            trace.attempts = attempt.attempts
            outcome = await self._send(request)

            match outcome:
                case Ok(response):
                    attempt.succeed()
                    trace.state = attempt.state.value
                    return self._process_response(dyn_call, response.body, parameters, request_parameters), trace

                case Err(error):
                    answer = self.classify_error(error)
                    trace.answer = answer

                    if answer is OnHttpErrorAnswer.NO_CONTENT:
                        attempt.succeed()
                        trace.state = attempt.state.value
                        return self._process_response(dyn_call, None, parameters, request_parameters), trace

                    if answer is OnHttpErrorAnswer.RETRY and attempt.can_retry():
                        attempt.record_failure(error)
                        trace.errors.append(error)
                        delay = attempt.next_delay()
                        logger.info(
                            "http_call_retry",
                            executor=repr(self),
                            attempt=attempt.attempts,
                            remaining=attempt.remaining,
                            delay=delay,
                            error=str(error),
                        )
                        await asyncio.sleep(delay)
                        continue

                    attempt.fail()
                    trace.errors.append(error)
                    trace.state = attempt.state.value
                    logger.warning(
                        "http_call_failed",
                        executor=repr(self),
                        attempts=attempt.attempts,
                        answer=answer.value,
                        error=str(error),
                        error_type=type(error).__name__,
                        category=categorize_error(error).value,
                        retryable=is_retryable(error),
                    )
                    return self._process_error(dyn_call, error), trace

    async def _send(self, request: _Request) -> Result[HttpResponse]:
        try:
            response = await self.http_client.request(
                request.method,
                request.path,
                full_path=request.full_path,
                authorization=request.authorization,
                query_parameters=request.query_parameters,
                query_string=request.query_string,
                body=request.body,
                content_type=request.content_type,
            )
        except Exception as e:
            return Err(e)
        return Ok(response)

    def classify_error(self, error: Exception) -> OnHttpErrorAnswer:
        on_http_error = self.config.on_http_error or default_on_http_error
        answer = on_http_error(error if isinstance(error, HttpError) else None)
        if not isinstance(answer, OnHttpErrorAnswer):
            raise InvalidConfigError("on_http_error", answer, f"Invalid on_http_error answer: {answer!r}")
        return answer

    # ------------------------------------------------------------------ #
    # Output processing
    # ------------------------------------------------------------------ #

    def _process_response(
        self,
        dyn_call: DynCall[Any, Any],
        output: str | None,
        parameters: Mapping[str, Any],
        request_parameters: Mapping[str, Any] | None,
    ) -> Any:
        validator = self.config.output_validator
        if validator is not None and not validator(output, parameters, request_parameters):
            invoke_interceptor(
                self.config.output_interceptor,
                self,
                output,
                False,
                output,
                parameters,
                request_parameters,
            )
            return None

        filtered = self.filter_output(dyn_call, output, parameters, request_parameters)
        invoke_interceptor(
            self.config.output_interceptor,
            self,
            output,
            True,
            filtered,
            parameters,
            request_parameters,
        )
        return dyn_call.parse_execution(filtered)

    def filter_output(
        self,
        dyn_call: DynCall[Any, Any],
        output: str | None,
        parameters: Mapping[str, Any],
        request_parameters: Mapping[str, Any] | None,
    ) -> str | None:
        config = self.config

        if config.output_filter is not None:
            return config.output_filter(output, parameters, request_parameters)

        if config.json_output_filter is not None:
            json_value = parse_json(output) if output is not None else None
            result = config.json_output_filter(json_value, parameters, request_parameters)
            return _to_output_string(result)

        if config.output_filter_pattern is not None:
            if dyn_call.output_kind is OutputKind.JSON:
                json_value = parse_json(output) if output is not None else None
                return render_pattern_json(
                    config.output_filter_pattern,
                    parameters,
                    json_value,
                    request_parameters,
                )
            return render_pattern(config.output_filter_pattern, parameters)

        return output

    def _process_error(self, dyn_call: DynCall[Any, Any], error: Exception) -> Any:
        return dyn_call.parse_execution(self.config.error_response)

    def __repr__(self) -> str:
        return f"HttpExecutor({self.config.method.value} {self.config.path or ''})"


def _to_output_string(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


__all__ = [
    "OnHttpErrorAnswer",
    "OnHttpError",
    "OutputValidator",
    "OutputFilterFn",
    "JsonOutputFilter",
    "default_on_http_error",
    "HttpExecutorConfig",
    "CallTrace",
    "HttpExecutor",
]
