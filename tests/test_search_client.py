"""Tests for the search service client."""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
import requests

from search.client import SearchClient, SearchError, SearchNotFoundError
from search.models import FlakeInstallable

V1_BODY = {
    "name": "python",
    "version": "3.11.4",
    "summary": "A high-level dynamically-typed programming language",
    "systems": {
        "x86_64-linux": {
            "attr_paths": ["python311", "python3"],
            "commit_hash": "a1b2c3",
            "version": "3.11.4",
            "last_updated": 1690000000,
            "store_hash": "abc",
            "store_name": "python3",
            "store_version": "3.11.4",
        },
        "aarch64-darwin": {
            "attr_paths": ["python311"],
            "commit_hash": "a1b2c3",
            "version": "3.11.4",
            "last_updated": 1690000000,
        },
    },
}

V2_BODY = {
    "name": "python",
    "version": "3.11.4",
    "systems": {
        "x86_64-linux": {
            "flake_installable": {
                "ref": {"type": "github", "owner": "NixOS", "repo": "nixpkgs", "rev": "a1b2c3"},
                "attr_path": "python311",
            },
            "last_updated": "2023-07-22T04:26:40Z",
            "outputs": [
                {"name": "out", "path": "/nix/store/abc-python3-3.11.4", "default": True},
                {"name": "dev", "path": "/nix/store/xyz-python3-3.11.4-dev"},
            ],
        },
        "aarch64-darwin": {
            "flake_installable": "github:NixOS/nixpkgs/a1b2c3#python311",
            "last_updated": "2023-07-22T04:26:40Z",
            "outputs": [],
        },
    },
}


class TestSearchClientResolve:
    """Legacy /v1/resolve."""

    @patch("search.client.get_json")
    def test_parses_package_version(self, mock_get_json):
        """A v1 body becomes a PackageVersion."""
        mock_get_json.return_value = (200, {}, V1_BODY)

        result = SearchClient("https://search.example.org/").resolve("python", "3.11.4")

        args, kwargs = mock_get_json.call_args
        assert args[0] == "https://search.example.org/v1/resolve"
        assert kwargs["params"] == {"name": "python", "version": "3.11.4"}
        assert result.version == "3.11.4"
        linux = result.systems["x86_64-linux"]
        assert linux.attr_paths == ["python311", "python3"]
        assert linux.store_hash == "abc"
        assert linux.last_modified == datetime.fromtimestamp(1690000000, tz=timezone.utc)
        assert result.systems["aarch64-darwin"].store_hash == ""

    @patch("search.client.get_json")
    def test_not_found(self, mock_get_json):
        """404 raises SearchNotFoundError."""
        mock_get_json.return_value = (404, {}, None)
        with pytest.raises(SearchNotFoundError):
            SearchClient().resolve("nope", "1.0")

    @patch("search.client.get_json")
    def test_server_error(self, mock_get_json):
        """Server errors raise SearchError."""
        mock_get_json.return_value = (500, {}, None)
        with pytest.raises(SearchError) as excinfo:
            SearchClient().resolve("python", "3.11.4")
        assert not isinstance(excinfo.value, SearchNotFoundError)

    @patch("search.client.get_json")
    def test_undecodable_body(self, mock_get_json):
        """An undecodable body raises SearchError."""
        mock_get_json.return_value = (200, {}, None)
        with pytest.raises(SearchError):
            SearchClient().resolve("python", "3.11.4")

    @patch("search.client.get_json")
    def test_transport_failure(self, mock_get_json):
        """Transport failures raise SearchError."""
        mock_get_json.side_effect = requests.ConnectionError("refused")
        with pytest.raises(SearchError, match="refused"):
            SearchClient().resolve("python", "3.11.4")


class TestSearchClientResolveV2:
    """Enriched /v2/resolve."""

    @patch("search.client.get_json")
    def test_parses_resolve_response(self, mock_get_json):
        """A v2 body becomes a ResolveResponse."""
        mock_get_json.return_value = (200, {}, V2_BODY)

        result = SearchClient("https://search.example.org").resolve_v2("python", "3.11.4")

        assert mock_get_json.call_args[0][0] == "https://search.example.org/v2/resolve"
        linux = result.systems["x86_64-linux"]
        assert isinstance(linux.flake_installable, FlakeInstallable)
        assert str(linux.flake_installable) == "github:NixOS/nixpkgs/a1b2c3#python311"
        assert linux.last_updated == datetime(2023, 7, 22, 4, 26, 40, tzinfo=timezone.utc)
        assert [o.path for o in linux.outputs] == [
            "/nix/store/abc-python3-3.11.4",
            "/nix/store/xyz-python3-3.11.4-dev",
        ]
        assert linux.outputs[0].default is True
        darwin = result.systems["aarch64-darwin"]
        assert str(darwin.flake_installable) == "github:NixOS/nixpkgs/a1b2c3#python311"
        assert darwin.outputs == []

    @patch("search.client.get_json")
    def test_not_found(self, mock_get_json):
        """404 raises SearchNotFoundError."""
        mock_get_json.return_value = (404, {}, None)
        with pytest.raises(SearchNotFoundError):
            SearchClient().resolve_v2("nope", "1.0")

    @patch("search.client.get_json")
    def test_zero_timestamp_is_absent(self, mock_get_json):
        """A zero timestamp parses as absent."""
        body = {
            "name": "hello",
            "version": "2.12",
            "systems": {"x86_64-linux": {"flake_installable": "x#hello", "last_updated": "0001-01-01T00:00:00Z"}},
        }
        mock_get_json.return_value = (200, {}, body)
        assert SearchClient().resolve_v2("hello", "2.12").systems["x86_64-linux"].last_updated is None
