import re

from ..core.base import Address
from ..core.errors import InvalidAddressFormat

# LUD-16 restricts the user part to these characters
LOCAL_PART = re.compile(r"^[a-z0-9\-_.+]+$")
HOST_LABEL = re.compile(r"^[a-z0-9]([a-z0-9\-]{0,61}[a-z0-9])?$")


def _valid_domain(domain: str) -> bool:
    labels = domain.split(".")
    if len(labels) < 2 or len(domain) > 253:
        return False
    return all(HOST_LABEL.match(label) for label in labels)


def parse_address(address: str) -> Address:
    """Split a lightning address `user@domain` into its parts.

    Both parts are lowercased. Raises InvalidAddressFormat if the string is
    not exactly `<local>@<domain>`, where the user part only uses the LUD-16
    characters `a-z0-9-_.+` and the domain is a bare dotted hostname (no
    port, path, query or fragment).
    """
    if not isinstance(address, str) or not address:
        raise InvalidAddressFormat("lightning address is empty")
    if any(c.isspace() for c in address):
        raise InvalidAddressFormat(f"lightning address contains whitespace: {address!r}")

    parts = address.split("@")
    if len(parts) != 2:
        raise InvalidAddressFormat(
            f"lightning address must contain exactly one '@': {address}"
        )
    local_part, domain = parts[0].lower(), parts[1].lower()
    if not local_part:
        raise InvalidAddressFormat(f"lightning address has no user part: {address}")
    if not domain:
        raise InvalidAddressFormat(f"lightning address has no domain: {address}")
    # "." and ".." would be collapsed out of the discovery path
    if not LOCAL_PART.match(local_part) or not local_part.strip("."):
        raise InvalidAddressFormat(f"invalid user part in lightning address: {address}")
    if not _valid_domain(domain):
        raise InvalidAddressFormat(f"invalid domain in lightning address: {address}")

    return Address(local_part=local_part, domain=domain)


def discovery_url(address: Address) -> str:
    # LUD-16: onion services are reached over plain http
    scheme = "http" if address.domain.endswith(".onion") else "https"
    return f"{scheme}://{address.domain}/.well-known/lnurlp/{address.local_part}"
