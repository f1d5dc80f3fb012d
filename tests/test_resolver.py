import hashlib

import httpx
import pytest
import respx
from httpx import Response

from zapdesk.core.errors import EndpointUnreachable, MalformedPayParameters
from zapdesk.lnurl.address import parse_address
from zapdesk.lnurl.cache import PayParametersCache
from zapdesk.lnurl.resolver import EndpointResolver, parse_pay_parameters
from tests.helpers import (
    ADDRESS,
    CALLBACK_URL,
    DISCOVERY_URL,
    METADATA,
    PAY_REQUEST,
    FakeClock,
    assert_err,
)


def make_resolver(clock=None) -> EndpointResolver:
    cache = PayParametersCache(ttl=300, clock=clock or FakeClock())
    return EndpointResolver(cache=cache)


@respx.mock
@pytest.mark.asyncio
async def test_resolve():
    route = respx.get(DISCOVERY_URL).mock(return_value=Response(200, json=PAY_REQUEST))
    resolver = make_resolver()
    params = await resolver.resolve(parse_address(ADDRESS))
    assert route.call_count == 1
    assert params.callback == CALLBACK_URL
    assert params.min_sendable == 1000
    assert params.max_sendable == 100000000
    assert params.min_sats == 1
    assert params.max_sats == 100000
    assert params.comment_allowed == 32
    assert params.metadata == METADATA
    assert params.metadata_hash == hashlib.sha256(METADATA.encode()).hexdigest()
    assert ADDRESS in resolver.cache


@respx.mock
@pytest.mark.asyncio
async def test_resolve_uses_cache():
    route = respx.get(DISCOVERY_URL).mock(return_value=Response(200, json=PAY_REQUEST))
    resolver = make_resolver()
    params1 = await resolver.resolve(parse_address(ADDRESS))
    params2 = await resolver.resolve(parse_address("Agent@Example.com"))
    assert params1 == params2
    assert route.call_count == 1


@respx.mock
@pytest.mark.asyncio
async def test_resolve_refetches_stale_entry():
    route = respx.get(DISCOVERY_URL).mock(return_value=Response(200, json=PAY_REQUEST))
    clock = FakeClock()
    resolver = make_resolver(clock)
    await resolver.resolve(parse_address(ADDRESS))
    clock.advance(301)
    await resolver.resolve(parse_address(ADDRESS))
    assert route.call_count == 2


@respx.mock
@pytest.mark.asyncio
async def test_resolve_not_found():
    respx.get(DISCOVERY_URL).mock(return_value=Response(404, text="not found"))
    resolver = make_resolver()
    await assert_err(resolver.resolve(parse_address(ADDRESS)), EndpointUnreachable)
    assert len(resolver.cache) == 0


@respx.mock
@pytest.mark.asyncio
async def test_resolve_server_error():
    respx.get(DISCOVERY_URL).mock(return_value=Response(500))
    resolver = make_resolver()
    await assert_err(resolver.resolve(parse_address(ADDRESS)), "HTTP 500")


@respx.mock
@pytest.mark.asyncio
async def test_resolve_timeout():
    respx.get(DISCOVERY_URL).mock(side_effect=httpx.ConnectTimeout)
    resolver = make_resolver()
    await assert_err(resolver.resolve(parse_address(ADDRESS)), EndpointUnreachable)
    assert len(resolver.cache) == 0


@respx.mock
@pytest.mark.asyncio
async def test_resolve_connection_error():
    respx.get(DISCOVERY_URL).mock(side_effect=httpx.ConnectError)
    resolver = make_resolver()
    await assert_err(resolver.resolve(parse_address(ADDRESS)), EndpointUnreachable)


@respx.mock
@pytest.mark.asyncio
async def test_resolve_not_json():
    respx.get(DISCOVERY_URL).mock(return_value=Response(200, text="<html></html>"))
    resolver = make_resolver()
    await assert_err(resolver.resolve(parse_address(ADDRESS)), MalformedPayParameters)
    assert len(resolver.cache) == 0


@respx.mock
@pytest.mark.asyncio
async def test_resolve_error_status():
    respx.get(DISCOVERY_URL).mock(
        return_value=Response(200, json={"status": "ERROR", "reason": "unknown user"})
    )
    resolver = make_resolver()
    await assert_err(resolver.resolve(parse_address(ADDRESS)), "unknown user")
    assert len(resolver.cache) == 0


@pytest.mark.parametrize(
    "field", ["callback", "minSendable", "maxSendable", "metadata"]
)
def test_parse_pay_parameters_missing_field(field: str):
    data = dict(PAY_REQUEST)
    del data[field]
    with pytest.raises(MalformedPayParameters):
        parse_pay_parameters(data)


@pytest.mark.parametrize(
    "field, value",
    [
        ("callback", 42),
        ("callback", "ftp://example.com/cb"),
        ("minSendable", "1000"),
        ("maxSendable", 1.5),
        ("minSendable", True),
        ("minSendable", -1),
        ("maxSendable", 999),  # smaller than minSendable
        ("metadata", ["text/plain", "tip"]),
        ("commentAllowed", "yes"),
        ("commentAllowed", -5),
        ("tag", "withdrawRequest"),
    ],
)
def test_parse_pay_parameters_wrong_type(field: str, value):
    data = dict(PAY_REQUEST)
    data[field] = value
    with pytest.raises(MalformedPayParameters):
        parse_pay_parameters(data)


def test_parse_pay_parameters_optional_fields():
    data = dict(PAY_REQUEST)
    del data["commentAllowed"]
    del data["tag"]
    params = parse_pay_parameters(data)
    assert params.comment_allowed == 0
    assert params.tag == "payRequest"


def test_parse_pay_parameters_not_an_object():
    with pytest.raises(MalformedPayParameters):
        parse_pay_parameters([PAY_REQUEST])
