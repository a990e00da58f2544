"""HTTP execution of DynCalls."""

from dyncall.calls.http.body import (
    BodyBuilder,
    BodyFunction,
    BodyPattern,
    BodyProducer,
    build_body,
    resolve_body_type,
)
from dyncall.calls.http.client import HttpClient, HttpMethod, HttpResponse
from dyncall.calls.http.credentials import (
    BasicCredential,
    BearerCredential,
    Credential,
    credential_from_json,
)
from dyncall.calls.http.executor import (
    CallTrace,
    HttpExecutor,
    HttpExecutorConfig,
    OnHttpErrorAnswer,
    default_on_http_error,
)
from dyncall.calls.http.factory import HttpExecutorBuilder, HttpExecutorFactory
from dyncall.calls.http.interceptors import (
    CredentialInterceptor,
    InterceptorChain,
    OutputInterceptor,
    invoke_interceptor,
)
from dyncall.calls.http.params import AuthorizationBuilder, ParameterBuilder

__all__ = [
    "BodyBuilder",
    "BodyPattern",
    "BodyProducer",
    "BodyFunction",
    "build_body",
    "resolve_body_type",
    "HttpClient",
    "HttpMethod",
    "HttpResponse",
    "Credential",
    "BasicCredential",
    "BearerCredential",
    "credential_from_json",
    "HttpExecutor",
    "HttpExecutorConfig",
    "CallTrace",
    "OnHttpErrorAnswer",
    "default_on_http_error",
    "HttpExecutorFactory",
    "HttpExecutorBuilder",
    "OutputInterceptor",
    "CredentialInterceptor",
    "InterceptorChain",
    "invoke_interceptor",
    "ParameterBuilder",
    "AuthorizationBuilder",
]
