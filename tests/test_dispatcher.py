"""End-to-end tests for declarest.dispatcher and declarest.bootstrap."""

from __future__ import annotations

import json
from typing import Annotated

import httpx
import pytest
from pydantic import BaseModel

from declarest import create
from declarest.codec import JsonBodyEncoder, JsonDecoder, ToStringDecoder, UrlFormEncoder
from declarest.dispatcher import GeneratedClient, for_method_or_class, to_class_key
from declarest.exceptions import ConfigurationError
from declarest.loader import load_interface
from declarest.markers import FormParam, PathParam, QueryParam, body, get, path, post
from declarest.models import ClientConfig, Options, RetryConfig, Target
from declarest.retry import NeverRetry
from declarest.wire import LoggingWire, NoOpWire

BASE_URL = "https://api.example.com"


class Contributor(BaseModel):
    login: str
    contributions: int


class GitHub:
    @get
    @path("/repos/{owner}/{repo}/contributors")
    def contributors(
        self, owner: Annotated[str, PathParam()], repo: Annotated[str, PathParam()]
    ) -> list[Contributor]: ...

    @get
    @path("/repos/{owner}/{repo}/readme")
    def readme(self, owner: Annotated[str, PathParam()], repo: Annotated[str, PathParam()]) -> str: ...

    @get
    @path("/search/repositories")
    def search(self, q: Annotated[str, QueryParam()], per_page: Annotated[int, QueryParam()] = 30) -> dict: ...


class Accounts:
    @post
    @path("/session")
    def login(self, user: Annotated[str, FormParam()], password: Annotated[str, FormParam()]) -> None: ...

    @post
    @path("/session/xml")
    @body("<login><user>{user}</user></login>")
    def login_xml(self, user: Annotated[str, FormParam()]) -> None: ...

    @post
    @path("/users")
    def register(self, account: dict) -> None: ...

    @get
    @path("/status")
    def status(self, base: httpx.URL) -> None: ...


def _github(transport, **kwargs):
    kwargs.setdefault("decoders", {"GitHub": JsonDecoder()})
    return create(GitHub, BASE_URL, transport=transport, retryer=NeverRetry(), **kwargs)


def _accounts(transport, **kwargs):
    return create(
        Accounts,
        BASE_URL,
        transport=transport,
        retryer=NeverRetry(),
        body_encoders={"Accounts": JsonBodyEncoder()},
        form_encoders={"Accounts": UrlFormEncoder()},
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Config lookup
# ---------------------------------------------------------------------------


class TestConfigLookup:
    def test_to_class_key(self) -> None:
        assert to_class_key("GitHub#contributors(str,str)") == "GitHub"

    def test_method_key_wins_over_class(self) -> None:
        config = {"GitHub": "class", "GitHub#readme(str,str)": "method"}
        assert for_method_or_class(config, "GitHub#readme(str,str)") == "method"
        assert for_method_or_class(config, "GitHub#contributors(str,str)") == "class"

    def test_missing(self) -> None:
        assert for_method_or_class({}, "GitHub#readme(str,str)") is None


# ---------------------------------------------------------------------------
# Generated client
# ---------------------------------------------------------------------------


class TestGeneratedClient:
    def test_contributors_end_to_end(self, fake_transport, response) -> None:
        payload = [{"login": "adriancole", "contributions": 42}]
        transport = fake_transport(response(200, json.dumps(payload)))
        github = _github(transport)

        result = github.contributors("netflix", "feign")

        assert result == [Contributor(login="adriancole", contributions=42)]
        request = transport.requests[0]
        assert request.method == "GET"
        assert request.url == "https://api.example.com/repos/netflix/feign/contributors"

    def test_client_implements_interface(self, fake_transport) -> None:
        github = _github(fake_transport())
        assert isinstance(github, GitHub)
        assert isinstance(github, GeneratedClient)
        assert type(github).__name__ == "GitHubClient"

    def test_keyword_arguments_and_defaults(self, fake_transport, response) -> None:
        transport = fake_transport(response(200, "{}"))
        _github(transport).search(q="feign")
        assert transport.requests[0].url == "https://api.example.com/search/repositories?q=feign&per_page=30"

    def test_bad_arguments_raise_type_error(self, fake_transport) -> None:
        github = _github(fake_transport())
        with pytest.raises(TypeError):
            github.readme("netflix")

    def test_method_config_overrides_class_config(self, fake_transport, response) -> None:
        transport = fake_transport(response(200, "# Feign"))
        github = _github(
            transport,
            decoders={"GitHub": JsonDecoder(), "GitHub#readme(str,str)": ToStringDecoder()},
        )
        assert github.readme("netflix", "feign") == "# Feign"

    def test_missing_decoder_is_configuration_error(self, fake_transport) -> None:
        with pytest.raises(ConfigurationError, match="present for Decoder!"):
            _github(fake_transport(), decoders={})

    def test_missing_body_encoder_is_configuration_error(self, fake_transport) -> None:
        with pytest.raises(ConfigurationError, match=r"Accounts#register\(dict\) present for BodyEncoder!"):
            create(Accounts, BASE_URL, transport=fake_transport(), form_encoders={"Accounts": UrlFormEncoder()})

    def test_missing_form_encoder_is_configuration_error(self, fake_transport) -> None:
        with pytest.raises(ConfigurationError, match=r"Accounts#login\(str,str\) present for FormEncoder!"):
            create(Accounts, BASE_URL, transport=fake_transport(), body_encoders={"Accounts": JsonBodyEncoder()})

    def test_options_come_from_config(self, fake_transport, response) -> None:
        transport = fake_transport(response(200, "x"))
        config = ClientConfig(options=Options(connect_timeout=2.0, read_timeout=3.0))
        _github(transport, config=config, decoders={"GitHub": ToStringDecoder()}).readme("a", "b")
        assert transport.options == [Options(connect_timeout=2.0, read_timeout=3.0)]

    def test_explicit_options_override_config(self, fake_transport, response) -> None:
        transport = fake_transport(response(200, "x"))
        _github(
            transport,
            config=ClientConfig(options=Options(read_timeout=3.0)),
            options={"GitHub#readme(str,str)": Options(read_timeout=9.0)},
            decoders={"GitHub": ToStringDecoder()},
        ).readme("a", "b")
        assert transport.options[0].read_timeout == 9.0


class TestForms:
    def test_url_form_encoded(self, fake_transport, response) -> None:
        transport = fake_transport(response(204, None))
        _accounts(transport).login("denominator", "s3cret&")

        request = transport.requests[0]
        assert request.body == "user=denominator&password=s3cret%26"
        assert request.headers["Content-Type"] == ("application/x-www-form-urlencoded",)

    def test_body_template_wins_over_form_encoder(self, fake_transport, response) -> None:
        transport = fake_transport(response(204, None))
        _accounts(transport).login_xml("denominator")
        assert transport.requests[0].body == "<login><user>denominator</user></login>"

    def test_json_body(self, fake_transport, response) -> None:
        transport = fake_transport(response(204, None))
        _accounts(transport).register({"user": "denominator"})

        request = transport.requests[0]
        assert request.body == '{"user":"denominator"}'
        assert request.headers["Content-Type"] == ("application/json",)

    def test_uri_override(self, fake_transport, response) -> None:
        transport = fake_transport(response(200, None))
        _accounts(transport).status(httpx.URL("https://alt.example.com/v2"))
        assert transport.requests[0].url == "https://alt.example.com/v2/status"


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class TestIdentity:
    def test_equal_targets_give_equal_clients(self, fake_transport) -> None:
        first = _github(fake_transport())
        second = _github(fake_transport())
        assert first == second
        assert hash(first) == hash(second)

    def test_different_url_not_equal(self, fake_transport) -> None:
        first = _github(fake_transport())
        other = create(
            GitHub,
            "https://github.example.com",
            transport=fake_transport(),
            decoders={"GitHub": JsonDecoder()},
        )
        assert first != other

    def test_repr_uses_target(self, fake_transport) -> None:
        transport = fake_transport()
        github = _github(transport)
        assert repr(github) == "GitHubClient(name='https://api.example.com', url='https://api.example.com')"
        assert transport.requests == []

    def test_name(self, fake_transport) -> None:
        github = _github(fake_transport(), name="github")
        assert github.target == Target(interface=GitHub, url=BASE_URL, name="github")


# ---------------------------------------------------------------------------
# Bootstrap defaults
# ---------------------------------------------------------------------------


class TestCreateDefaults:
    def test_retry_policy_from_config(self, fake_transport) -> None:
        github = create(
            GitHub,
            BASE_URL,
            transport=fake_transport(),
            config=ClientConfig(retry=RetryConfig(max_attempts=7)),
            decoders={"GitHub": JsonDecoder()},
        )
        handler = github._handlers["GitHub#readme(str,str)"]
        assert handler.retryer.max_attempts == 7

    def test_wire_logging_enabled_by_config(self, fake_transport) -> None:
        github = _github(fake_transport(), config=ClientConfig(log_wire=True))
        assert isinstance(github._handlers["GitHub#readme(str,str)"].wire, LoggingWire)

    def test_no_wire_logging_by_default(self, fake_transport) -> None:
        github = _github(fake_transport())
        assert isinstance(github._handlers["GitHub#readme(str,str)"].wire, NoOpWire)

    def test_descriptor_interface(self, fake_transport, response) -> None:
        api = load_interface(
            {
                "name": "Api",
                "operations": [
                    {
                        "name": "item",
                        "markers": [
                            {"kind": "http_method", "verb": "GET"},
                            {"kind": "path", "value": "/items/{item_id}"},
                        ],
                        "parameters": [
                            {"name": "item_id", "type_name": "int", "markers": [{"kind": "path_param"}]}
                        ],
                        "return_type": "dict",
                    }
                ],
            }
        )
        transport = fake_transport(response(200, '{"id": 7}'))
        client = create(api, BASE_URL, transport=transport, decoders={"Api": JsonDecoder()})

        assert client.item(7) == {"id": 7}
        assert client.item.__name__ == "item"
        assert transport.requests[0].url == "https://api.example.com/items/7"
        assert repr(client) == "ApiClient(name='https://api.example.com', url='https://api.example.com')"
