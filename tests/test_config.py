import pytest

from portal_client.config import ClientConfig
from portal_client.exceptions import ConfigurationError


def test_from_env_reads_base_url_and_flags():
    config = ClientConfig.from_env(
        {
            "PORTAL_BACKEND_BASE_URL": "https://portal.example/api/",
            "PORTAL_VERIFY_SSL": "off",
            "PORTAL_TIMEOUT": "5",
        }
    )

    assert config.require_base_url() == "https://portal.example/api"
    assert config.verify_ssl is False
    assert config.timeout == 5.0


def test_from_env_without_base_url_defers_error():
    config = ClientConfig.from_env({})

    assert config.base_url is None
    with pytest.raises(ConfigurationError, match="PORTAL_BACKEND_BASE_URL"):
        config.require_base_url()


def test_from_env_rejects_bad_timeout():
    with pytest.raises(ConfigurationError):
        ClientConfig.from_env({"PORTAL_TIMEOUT": "soon"})


@pytest.mark.parametrize("blank", [None, "", "   "])
def test_blank_base_url_is_configuration_error(blank):
    with pytest.raises(ConfigurationError):
        ClientConfig(base_url=blank).resolve_url("/cases")


def test_resolve_url_joins_relative_and_keeps_absolute():
    config = ClientConfig(base_url="https://portal.example/api")

    assert config.resolve_url("cases/1") == "https://portal.example/api/cases/1"
    assert config.resolve_url("/cases/1") == "https://portal.example/api/cases/1"
    assert config.resolve_url("https://other.example/x") == "https://other.example/x"


def test_default_headers_override_json_defaults():
    config = ClientConfig(base_url="https://p", default_headers={"Accept": "text/plain"})

    assert config.resolved_headers() == {
        "Accept": "text/plain",
        "Content-Type": "application/json",
    }
