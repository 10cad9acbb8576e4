"""
Tests for asset reference parsing
"""

import pytest

from kapeta_registry.utils.uri_utils import parse_asset_uri, to_reference


class TestParseAssetUri:

    def test_full_reference(self):
        uri = parse_asset_uri("kapeta://acme/users:1.2.3")
        assert uri.handle == "acme"
        assert uri.name == "users"
        assert uri.version == "1.2.3"
        assert uri.full_name == "acme/users"
        assert uri.id == "acme/users:1.2.3"
        assert not uri.is_local

    def test_reference_without_scheme(self):
        uri = parse_asset_uri("acme/users:local")
        assert uri.is_local
        assert uri.to_reference() == "kapeta://acme/users:local"

    def test_reference_without_version(self):
        uri = parse_asset_uri("acme/users")
        assert uri.version is None
        assert uri.id == "acme/users"

    def test_default_handle(self):
        uri = parse_asset_uri("users:1.0.0", default_handle="acme")
        assert uri.full_name == "acme/users"

    def test_missing_handle_raises(self):
        with pytest.raises(ValueError):
            parse_asset_uri("users:1.0.0")

    @pytest.mark.parametrize("value", ["", "   ", "acme/users:", "acme/a/b:1.0.0"])
    def test_invalid_references(self, value):
        with pytest.raises(ValueError):
            parse_asset_uri(value)

    def test_matches_ignores_version_and_case(self):
        a = parse_asset_uri("kapeta://Acme/Users:local")
        b = parse_asset_uri("acme/users:2.0.0")
        assert a.matches(b)
        assert not a.matches(parse_asset_uri("acme/orders:1.0.0"))


def test_to_reference():
    assert to_reference("acme/users", "1.0.0") == "kapeta://acme/users:1.0.0"
