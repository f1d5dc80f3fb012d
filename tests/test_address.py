import pytest

from zapdesk.core.base import Address
from zapdesk.core.errors import InvalidAddressFormat
from zapdesk.lnurl.address import discovery_url, parse_address


@pytest.mark.parametrize(
    "address",
    [
        "agent@example.com",
        "covertbrian73@walletofsatoshi.com",
        "first.last@sub.domain.org",
        "tips_2024@getalby.com",
        "Agent@Example.COM",
    ],
)
def test_parse_address(address: str):
    parsed = parse_address(address)
    assert f"{parsed.local_part}@{parsed.domain}" == address.lower()
    assert parsed.key == address.lower()
    assert str(parsed) == address.lower()


@pytest.mark.parametrize(
    "address",
    [
        "",
        "agent",
        "agent.example.com",
        "agent@@example.com",
        "a@b@example.com",
        "@example.com",
        "agent@",
        "agent@localhost",
        "agent@.com",
        "agent@example.",
        "agent @example.com",
        "agent@example.com ",
        "\tagent@example.com",
        "agent#evil@example.com",
        "agent?x=1@example.com",
        "x/../agent@example.com",
        "..@example.com",
        "agent%2f@example.com",
        "agent@example.com?x",
        "agent@example.com/evil",
        "agent@example.com#frag",
        "agent@example.com:8080",
        "agent@user:pass.example.com",
        "agent@-example.com",
        "agent@example..com",
        "agent@exa_mple.com",
    ],
)
def test_parse_address_invalid(address: str):
    with pytest.raises(InvalidAddressFormat):
        parse_address(address)


@pytest.mark.parametrize(
    "address",
    ["tip+support@example.com", "a-b.c_d@my-wallet.example.com"],
)
def test_parse_address_lud16_characters(address: str):
    parsed = parse_address(address)
    assert discovery_url(parsed) == (
        f"https://{parsed.domain}/.well-known/lnurlp/{parsed.local_part}"
    )


def test_parse_address_not_a_string():
    with pytest.raises(InvalidAddressFormat):
        parse_address(None)  # type: ignore


def test_discovery_url():
    assert (
        discovery_url(Address(local_part="agent", domain="example.com"))
        == "https://example.com/.well-known/lnurlp/agent"
    )


def test_discovery_url_onion():
    address = parse_address("agent@abcdefghijklmnop.onion")
    assert discovery_url(address) == (
        "http://abcdefghijklmnop.onion/.well-known/lnurlp/agent"
    )
