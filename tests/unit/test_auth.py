"""Unit tests for TokenResolver."""

import pytest

from openapi_mcp_adapter.auth import TokenResolver
from openapi_mcp_adapter.errors import AuthenticationError


class TestTokenResolver:
    """Tests for token precedence and caching."""

    def test_primary_variable_wins(self):
        """Test that the primary variable beats every other source."""
        resolver = TokenResolver(
            environ={"API_TOKEN": "primary", "ACCESS_TOKEN": "secondary"},
            argv=["prog", "--token", "flag"],
        )
        assert resolver.resolve() == "primary"

    def test_secondary_variable_used_when_primary_missing(self):
        """Test the second step of the chain."""
        resolver = TokenResolver(
            environ={"ACCESS_TOKEN": "secondary"}, argv=["prog", "--token", "flag"]
        )
        assert resolver.resolve() == "secondary"

    def test_empty_primary_is_skipped(self):
        """Test that an empty variable does not count as a token."""
        resolver = TokenResolver(environ={"API_TOKEN": "", "ACCESS_TOKEN": "secondary"}, argv=[])
        assert resolver.resolve() == "secondary"

    def test_token_flag_used_last(self):
        """Test that --token is read from the process arguments."""
        resolver = TokenResolver(environ={}, argv=["prog", "--verbose", "--token", "flag"])
        assert resolver.resolve() == "flag"

    def test_token_flag_without_value_raises(self):
        """Test that a trailing --token is not a token."""
        resolver = TokenResolver(environ={}, argv=["prog", "--token"])
        with pytest.raises(AuthenticationError):
            resolver.resolve()

    def test_no_source_raises(self):
        """Test the error raised when nothing is configured."""
        resolver = TokenResolver(environ={}, argv=["prog"])
        with pytest.raises(AuthenticationError) as exc_info:
            resolver.resolve()
        assert "--token" in str(exc_info.value)
        assert "API_TOKEN" in str(exc_info.value)
        assert not resolver.cached

    def test_custom_variable_names(self):
        """Test that the variable names are configurable."""
        resolver = TokenResolver(
            primary_env_var="GITHUB_TOKEN",
            secondary_env_var="GH_TOKEN",
            environ={"GH_TOKEN": "gh", "API_TOKEN": "ignored"},
            argv=[],
        )
        assert resolver.resolve() == "gh"

    def test_value_is_cached(self):
        """Test that later changes to the environment are not seen."""
        environ = {"API_TOKEN": "first"}
        resolver = TokenResolver(environ=environ, argv=[])
        assert resolver.resolve() == "first"

        environ["API_TOKEN"] = "second"
        environ["ACCESS_TOKEN"] = "third"
        assert resolver.resolve() == "first"
        assert resolver.cached

    def test_reads_process_environment_by_default(self, monkeypatch):
        """Test resolution against os.environ and its caching."""
        monkeypatch.setenv("API_TOKEN", "from-env")
        resolver = TokenResolver(argv=[])
        assert resolver.resolve() == "from-env"

        monkeypatch.setenv("API_TOKEN", "changed")
        assert resolver.resolve() == "from-env"

    def test_failed_resolution_is_retried(self):
        """Test that nothing is cached until a token is found."""
        environ = {}
        resolver = TokenResolver(environ=environ, argv=[])
        with pytest.raises(AuthenticationError):
            resolver.resolve()

        environ["ACCESS_TOKEN"] = "late"
        assert resolver.resolve() == "late"
