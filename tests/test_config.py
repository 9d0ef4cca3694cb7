# pyright: reportUnknownMemberType=false
import pytest

from gatekit.networking.cancel import CancelToken
from gatekit.networking.config import (
    HttpClientConfig,
    RequestConfig,
    merge_config,
    update_config,
)
from gatekit.networking.urls import SearchParams


def test_config_defaults_are_stable():
    config = HttpClientConfig()

    assert config.url is None
    assert dict(config.headers) == {}
    assert config.query is None
    assert config.timeout is None
    assert config.cancel is None
    assert config.on_request is None
    assert config.throw_on_client_error is True
    assert dict(config.options) == {}


def test_config_normalizes_base_url():
    assert HttpClientConfig(url="http://a.example/v1").url == "http://a.example/v1/"
    assert HttpClientConfig(url="http://a.example/v1/").url == "http://a.example/v1/"


def test_config_headers_are_independent():
    first = HttpClientConfig()
    second = HttpClientConfig()

    assert first.headers is not second.headers


def test_config_headers_are_immutable():
    config = HttpClientConfig(headers={"X-Test": "1"})

    with pytest.raises(TypeError):
        config.headers["X-Test"] = "2"  # type: ignore[index]


def test_config_copies_external_headers_input():
    headers = {"X-Test": "1"}
    config = HttpClientConfig(headers=headers)
    headers["X-Test"] = "2"

    assert config.headers["X-Test"] == "1"


def test_config_rejects_non_positive_timeouts():
    with pytest.raises(ValueError):
        HttpClientConfig(timeout=0)
    with pytest.raises(ValueError):
        HttpClientConfig(timeout=-1)
    with pytest.raises(ValueError):
        RequestConfig(timeout=0)


def test_from_kwargs_routes_unknown_keys_to_options():
    config = HttpClientConfig.from_kwargs(
        url="http://a.example", timeout=2.0, verify=False, options={"cert": "c"}
    )

    assert config.timeout == 2.0
    assert dict(config.options) == {"cert": "c", "verify": False}


def test_request_defaults_are_mutable_copies():
    config = HttpClientConfig(headers={"X-Test": "1"}, timeout=3.0)

    defaults = config.request_defaults()
    defaults.headers["X-Other"] = "2"

    assert defaults.timeout == 3.0
    assert dict(config.headers) == {"X-Test": "1"}


def test_merge_call_values_take_precedence():
    base = RequestConfig(
        headers={"a": "1", "b": "1"}, timeout=5.0, options={"verify": True}
    )
    call = RequestConfig(
        method="POST", headers={"b": "2"}, timeout=1.0, options={"stream": True}
    )

    merged = merge_config(base, call)

    assert merged.method == "POST"
    assert merged.headers == {"a": "1", "b": "2"}
    assert merged.timeout == 1.0
    assert merged.options == {"verify": True, "stream": True}


def test_merge_keeps_base_values_when_call_omits_them():
    token = CancelToken()
    base = RequestConfig(timeout=5.0, cancel=token)

    merged = merge_config(base)

    assert merged.timeout == 5.0
    assert merged.cancel is token
    assert merged is not base


def test_merge_shallow_merges_query_mappings():
    base = RequestConfig(query={"lang": "en", "page": 1})
    call = RequestConfig(query={"page": 2})

    assert merge_config(base, call).query == {"lang": "en", "page": 2}


def test_merge_search_params_query_replaces_base():
    params = SearchParams([("id", 1), ("id", 2)])
    base = RequestConfig(query={"lang": "en"})

    merged = merge_config(base, RequestConfig(query=params)).query

    assert merged == params
    assert merged is not params


def test_merge_does_not_mutate_inputs():
    base = RequestConfig(headers={"a": "1"})
    call = RequestConfig(headers={"b": "2"})

    merge_config(base, call)

    assert base.headers == {"a": "1"}
    assert call.headers == {"b": "2"}


def test_update_config_replaces_whole_fields():
    config = RequestConfig(headers={"a": "1"}, timeout=2.0)

    updated = update_config(config, headers={"b": "2"})

    assert updated.headers == {"b": "2"}
    assert updated.timeout == 2.0


def test_merge_copies_query_when_call_omits_it():
    base = RequestConfig(query={"a": 1})

    merged = merge_config(base)
    merged.query["leak"] = "yes"

    assert base.query == {"a": 1}


def test_config_copies_external_query_input():
    query = {"lang": "en"}
    config = HttpClientConfig(query=query)

    query["page"] = 2

    assert config.query == {"lang": "en"}
    defaults = config.request_defaults()
    defaults.query["page"] = 3
    assert config.query == {"lang": "en"}
