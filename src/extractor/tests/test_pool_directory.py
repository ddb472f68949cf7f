import json

import pytest

from src.extractor.errors import ConfigurationError, PoolDirectoryError
from src.extractor.pools.directory import SAMPLE_POOLS_FILE, PoolDirectory


def test_load_from_file(tmp_path):
    path = tmp_path / "pools.json"
    path.write_text(json.dumps({
        "coinbase_tags": {"/Foo/": {"name": "Foo Pool", "link": "https://foo.example"}},
        "payout_addresses": {"1FooAddress": {"name": "Foo Pool"}},
    }))

    directory = PoolDirectory.from_file(str(path))

    assert directory.pool_by_address("1FooAddress") == "Foo Pool"
    assert directory.coinbase_tags == (("/Foo/", "Foo Pool"),)


def test_sample_directory_loads():
    directory = PoolDirectory.from_file(SAMPLE_POOLS_FILE)
    assert len(directory.coinbase_tags) > 0
    assert directory.pool_by_coinbase_message("mined by /ViaBTC/ xyz") == "ViaBTC"


def test_sample_file_ships_with_the_package():
    assert SAMPLE_POOLS_FILE.endswith("pools.sample.json")


def test_address_lookup_is_exact(directory, pool_x_address):
    assert directory.pool_by_address(pool_x_address) == "PoolX"
    assert directory.pool_by_address(pool_x_address.lower()) is None
    assert directory.pool_by_address(pool_x_address[:-1]) is None


@pytest.mark.parametrize("message, expected", [
    ("\x03abc/PoolY/xyz", "PoolY"),
    ("\x03abc/pooly/xyz", "PoolY"),
    ("\x03abc/POOLY/xyz", "PoolY"),
    ("nothing here", None),
])
def test_tag_lookup_ignores_case(directory, message, expected):
    assert directory.pool_by_coinbase_message(message) == expected


def test_first_tag_in_file_order_wins(directory):
    # "/Foo/" and "Foo" both occur; "/Foo/" is listed first
    assert directory.pool_by_coinbase_message("xx/Foo/xx") == "Foo Pool"
    assert directory.pool_by_coinbase_message("xxFooxx") == "Loose Foo"


def test_directory_is_immutable(directory):
    with pytest.raises(AttributeError):
        directory.coinbase_tags = ()
    with pytest.raises(TypeError):
        directory.payout_addresses["1New"] = "New Pool"


def test_missing_file_is_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        PoolDirectory.from_file(str(tmp_path / "missing.json"))


def test_invalid_json(tmp_path):
    path = tmp_path / "pools.json"
    path.write_text("{not json")
    with pytest.raises(PoolDirectoryError):
        PoolDirectory.from_file(str(path))


@pytest.mark.parametrize("data", [
    {"coinbase_tags": {}},
    {"payout_addresses": {}},
    {"coinbase_tags": {"/Foo/": {"link": "x"}}, "payout_addresses": {}},
    {"coinbase_tags": {"/Foo/": "Foo"}, "payout_addresses": {}},
    {"coinbase_tags": {"": {"name": "Everything"}}, "payout_addresses": {}},
    {"coinbase_tags": {"/Foo/": {"name": "Foo\nPool"}}, "payout_addresses": {}},
    {"coinbase_tags": {}, "payout_addresses": {"1Foo": {"name": "Foo\rPool"}}},
    [],
])
def test_malformed_directory(data):
    with pytest.raises(PoolDirectoryError):
        PoolDirectory.from_dict(data)


def test_tags_are_lowered_once_at_load():
    directory = PoolDirectory.from_dict({
        "coinbase_tags": {"/ViaBTC/": {"name": "ViaBTC"}},
        "payout_addresses": {},
    })

    assert directory.coinbase_tags == (("/ViaBTC/", "ViaBTC"),)
    assert directory.lowered_tags == (("/viabtc/", "ViaBTC"),)
    assert directory.pool_by_coinbase_message("Mined by /VIABTC/") == "ViaBTC"
