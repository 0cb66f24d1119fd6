import hashlib

import pytest

from chains.cosmos.ibc_denoms import (
    DenomTrace,
    compute_ibc_hash,
    extract_ibc_hash,
    format_channels,
    is_ibc_denom,
    parse_path,
    split_full_path,
    to_ibc_denom,
    truncate_ibc_hash,
    validate_ibc_hash,
)
from exceptions import MalformedHash

# transfer/channel-0/uatom as seen on Osmosis
ATOM_ON_OSMOSIS = "27394FB092D2ECCD56123C74F36E4C1F926001CEADA9CA97EA622B25F41E5EB2"


def test_compute_ibc_hash():
    assert compute_ibc_hash("transfer/channel-0", "uatom") == ATOM_ON_OSMOSIS
    expected = hashlib.sha256(b"transfer/channel-0/transfer/channel-3/uosmo").hexdigest().upper()
    assert compute_ibc_hash("transfer/channel-0/transfer/channel-3", "uosmo") == expected


def test_validate_ibc_hash_normalizes_case():
    assert validate_ibc_hash(ATOM_ON_OSMOSIS.lower()) == ATOM_ON_OSMOSIS


@pytest.mark.parametrize("ibc_hash", ["", "ABC", "Z" * 64, ATOM_ON_OSMOSIS + "0"])
def test_validate_ibc_hash_malformed(ibc_hash: str):
    with pytest.raises(MalformedHash):
        validate_ibc_hash(ibc_hash)


def test_extract_ibc_hash():
    assert extract_ibc_hash("uatom") is None
    assert extract_ibc_hash(f"ibc/{ATOM_ON_OSMOSIS.lower()}") == ATOM_ON_OSMOSIS
    with pytest.raises(MalformedHash) as exc_info:
        extract_ibc_hash("ibc/not-a-hash")
    assert exc_info.value.denom == "ibc/not-a-hash"
    assert isinstance(exc_info.value, ValueError)


def test_is_ibc_denom():
    assert is_ibc_denom(to_ibc_denom(ATOM_ON_OSMOSIS))
    assert not is_ibc_denom("uatom")
    assert not is_ibc_denom("factory/osmo1abc/uion")


def test_parse_path():
    assert parse_path("") == []
    assert parse_path("transfer/channel-0") == [("transfer", "channel-0")]
    assert parse_path("transfer/channel-0/wasm.juno1xyz/channel-7") == [
        ("transfer", "channel-0"),
        ("wasm.juno1xyz", "channel-7"),
    ]
    for path in ("transfer", "transfer/channel-0/transfer", "transfer//"):
        with pytest.raises(ValueError):
            parse_path(path)


def test_split_full_path():
    assert split_full_path("transfer/channel-0/uatom") == ("transfer/channel-0", "uatom")
    assert split_full_path("uatom") == ("", "uatom")
    assert split_full_path("transfer/channel-0/transfer/channel-1/gamm/pool/1") == (
        "transfer/channel-0/transfer/channel-1",
        "gamm/pool/1",
    )
    assert split_full_path("factory/osmo1abc/uion") == ("", "factory/osmo1abc/uion")


def test_denom_trace():
    trace = DenomTrace(base_denom="uatom", path="transfer/channel-0/transfer/channel-3")
    assert trace.full_path == "transfer/channel-0/transfer/channel-3/uatom"
    assert trace.hops == [("transfer", "channel-0"), ("transfer", "channel-3")]
    assert DenomTrace(base_denom="uatom", path="").full_path == "uatom"

    with_display = trace.with_display(symbol="ATOM", decimals=6)
    assert with_display.symbol == "ATOM" and trace.symbol is None
    assert DenomTrace.from_data(with_display.to_data()) == with_display


def test_display_helpers():
    assert format_channels("transfer/channel-0/transfer/channel-3") == "channel-0/channel-3"
    assert truncate_ibc_hash(ATOM_ON_OSMOSIS) == "ibc/27394FB0"
