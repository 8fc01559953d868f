"""Unit tests for endpoint configuration."""
import re

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from echoctl.hivemind import EndpointConfig, generate_session_key, normalize_base_url
from echoctl.hivemind.config import DEFAULT_MODEL, DEFAULT_SERVER, DEFAULT_TIMEOUT

SESSION_KEY_PATTERN = re.compile(r"^echo-(.+)-(\d+)$")

hosts = st.from_regex(r"[a-z][a-z0-9.-]{0,20}(:[0-9]{1,5})?", fullmatch=True)


class TestNormalizeBaseUrl:
    """Tests for server address normalization."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("localhost:11789", "http://localhost:11789"),
            ("http://localhost:11789/", "http://localhost:11789"),
            ("https://example.com//", "https://example.com"),
            ("  example.com:8080  ", "http://example.com:8080"),
            ("HTTPS://Example.com", "HTTPS://Example.com"),
            ("http://host/prefix/", "http://host/prefix"),
        ],
    )
    def test_examples(self, raw, expected):
        assert normalize_base_url(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "http://", "https:///"])
    def test_missing_host_fails(self, raw):
        with pytest.raises(ValueError):
            normalize_base_url(raw)

    @pytest.mark.parametrize("raw", ["ftp://host:1/", "ws://localhost:11789", "unix:///tmp/sock"])
    def test_foreign_scheme_rejected(self, raw):
        """Test that a non-HTTP scheme is refused instead of getting a second prefix."""
        with pytest.raises(ValueError, match="unsupported scheme"):
            normalize_base_url(raw)

    @given(
        st.from_regex(r"[a-z][a-z0-9+.-]{0,8}", fullmatch=True),
        hosts,
        st.integers(min_value=0, max_value=3),
    )
    def test_any_scheme_never_doubled(self, scheme: str, host: str, slashes: int):
        """Property test: whatever the scheme, the result never carries two."""
        try:
            url = normalize_base_url(f"{scheme}://{host}" + "/" * slashes)
        except ValueError:
            assert scheme.lower() not in ("http", "https")
        else:
            assert url.count("://") == 1
            assert url.startswith(("http://", "https://"))

    @given(hosts, st.sampled_from(["", "http://", "https://"]), st.integers(min_value=0, max_value=3))
    def test_one_scheme_no_trailing_slash(self, host: str, scheme: str, slashes: int):
        """Property test: result has exactly one scheme and no trailing slash."""
        url = normalize_base_url(scheme + host + "/" * slashes)

        assert url.startswith(("http://", "https://"))
        assert not url.endswith("/")
        assert url.count("://") == 1
        assert url.endswith(host.rstrip("/"))

    @given(hosts)
    def test_idempotent(self, host: str):
        once = normalize_base_url(host)
        assert normalize_base_url(once) == once


class TestSessionKey:
    """Tests for generated session keys."""

    def test_generated_key_format(self):
        match = SESSION_KEY_PATTERN.match(generate_session_key("Echoryn"))
        assert match is not None
        assert match.group(1) == "Echoryn"

    def test_generated_keys_differ(self):
        keys = {generate_session_key("m") for _ in range(50)}
        assert len(keys) > 1


class TestEndpointConfig:
    """Tests for the EndpointConfig model."""

    def test_defaults(self):
        config = EndpointConfig()

        assert config.base_url == DEFAULT_SERVER
        assert config.model == DEFAULT_MODEL
        assert config.timeout == DEFAULT_TIMEOUT
        assert SESSION_KEY_PATTERN.match(config.session_key)

    def test_empty_session_key_is_generated_from_model(self):
        config = EndpointConfig(model="Tiny", session_key="")
        assert config.session_key.startswith("echo-Tiny-")

    def test_explicit_session_key_kept(self):
        config = EndpointConfig(session_key="abc")
        assert config.session_key == "abc"

    def test_url_normalized(self):
        config = EndpointConfig(base_url="hivemind.local:9000/")
        assert config.base_url == "http://hivemind.local:9000"
        assert config.completions_url == "http://hivemind.local:9000/v1/chat/completions"

    def test_invalid_timeout_fails(self):
        with pytest.raises(ValidationError):
            EndpointConfig(timeout=0)

    def test_empty_model_fails(self):
        with pytest.raises(ValidationError):
            EndpointConfig(model="")

    def test_empty_host_fails(self):
        with pytest.raises(ValidationError):
            EndpointConfig(base_url="http://")

    def test_foreign_scheme_fails(self):
        with pytest.raises(ValidationError):
            EndpointConfig(base_url="ftp://host:1")

    def test_config_is_frozen(self):
        config = EndpointConfig()
        with pytest.raises(ValidationError):
            config.model = "other"  # type: ignore
