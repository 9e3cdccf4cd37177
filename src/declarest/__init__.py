"""declarest -- Declarative HTTP clients from annotated Python classes.

An interface class describes each operation with decorators (HTTP verb,
path, body, media types) and ``Annotated`` parameter markers. declarest
compiles those markers into request templates and returns a client whose
methods perform the HTTP calls::

    class GitHub:
        @get
        @path("/repos/{owner}/{repo}/contributors")
        def contributors(
            self,
            owner: Annotated[str, PathParam()],
            repo: Annotated[str, PathParam()],
        ) -> list[Contributor]: ...

    github = create(GitHub, "https://api.github.com", decoders={"GitHub": JsonDecoder()})
    github.contributors("netflix", "feign")

Modules:
    markers: Decorators and parameter markers.
    contract: Compiles an interface into per-operation metadata.
    template: The request template expansion engine.
    handler: The per-operation bind/execute/decode pipeline.
    dispatcher: Handler resolution and the generated client class.
    codec: Encoder/decoder contracts and stock implementations.
    transport: The Transport contract and its httpx implementation.
    config: Client configuration with precedence resolution.
    exceptions: Exception hierarchy.
"""

from declarest.bootstrap import create
from declarest.codec import (
    BodyEncoder,
    Decoder,
    DefaultErrorDecoder,
    ErrorDecoder,
    FormEncoder,
    JsonBodyEncoder,
    JsonDecoder,
    JsonFormEncoder,
    ToStringDecoder,
    UrlFormEncoder,
)
from declarest.exceptions import (
    ApplicationError,
    ArgumentError,
    ConfigurationError,
    DeclarestError,
    DecodeError,
    TransportError,
)
from declarest.markers import (
    FormParam,
    HeaderParam,
    PathParam,
    QueryParam,
    body,
    consumes,
    delete,
    get,
    head,
    http_method,
    options,
    patch,
    path,
    post,
    produces,
    put,
)
from declarest.models import Options, Request, Response, ResponseBody, Target
from declarest.retry import DefaultRetryer, NeverRetry, Retryer
from declarest.template import RequestTemplate
from declarest.transport import HttpxTransport, Transport
from declarest.wire import LoggingWire, NoOpWire, Wire

__version__ = "0.1.0"

__all__ = [
    "ApplicationError",
    "ArgumentError",
    "BodyEncoder",
    "ConfigurationError",
    "DeclarestError",
    "DecodeError",
    "Decoder",
    "DefaultErrorDecoder",
    "DefaultRetryer",
    "ErrorDecoder",
    "FormEncoder",
    "FormParam",
    "HeaderParam",
    "HttpxTransport",
    "JsonBodyEncoder",
    "JsonDecoder",
    "JsonFormEncoder",
    "LoggingWire",
    "NeverRetry",
    "NoOpWire",
    "Options",
    "PathParam",
    "QueryParam",
    "Request",
    "RequestTemplate",
    "Response",
    "ResponseBody",
    "Retryer",
    "Target",
    "ToStringDecoder",
    "Transport",
    "UrlFormEncoder",
    "Wire",
    "body",
    "consumes",
    "create",
    "delete",
    "get",
    "head",
    "http_method",
    "options",
    "patch",
    "path",
    "post",
    "produces",
    "put",
]
