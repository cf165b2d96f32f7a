import ssl
import pytest
from pydantic import ValidationError

from framelink.bootstrap.config.settings import ClientSettings, ServerSettings, TLSSettings
from tests.helpers import FakeFrameLinkConfig


@pytest.mark.ut
def test_defaults_without_file(monkeypatch):
    monkeypatch.delenv("TEST_FRAMELINKCONFIG", raising=False)
    config = FakeFrameLinkConfig()

    assert config.server.host == "127.0.0.1"
    assert config.server.port == 7000
    assert config.tls.enabled is False
    assert config.get_ssl_ctx() is None

    client_config = config.get_client_config()
    assert client_config.ssl_ctx is None
    assert client_config.max_message_size is None
    assert client_config.connect_timeout is None
    assert client_config.close_timeout == 5.0


@pytest.mark.ut
def test_loads_yaml_file(config_file, tls_files):
    config = FakeFrameLinkConfig()

    assert config.server.port == 7001
    assert config.tls.cafile == tls_files.cafile
    assert config.client.max_message_size == 4096

    client_config = config.get_client_config()
    assert isinstance(client_config.ssl_ctx, ssl.SSLContext)
    assert client_config.ssl_ctx.verify_mode == ssl.CERT_REQUIRED
    assert client_config.connect_timeout == 2.5


@pytest.mark.ut
def test_init_values_override_file(config_file):
    config = FakeFrameLinkConfig(server={"host": "example.org", "port": 9000})
    assert config.server.host == "example.org"
    assert config.server.port == 9000


@pytest.mark.ut
@pytest.mark.parametrize("port", [-1, 65536])
def test_port_out_of_range(port):
    with pytest.raises(ValidationError):
        ServerSettings(port=port)


@pytest.mark.ut
def test_missing_tls_file(tmp_path):
    with pytest.raises(ValidationError):
        TLSSettings(enabled=True, cafile=tmp_path / "missing.pem")


@pytest.mark.ut
def test_max_message_size_must_be_positive():
    with pytest.raises(ValidationError):
        ClientSettings(max_message_size=0)


@pytest.mark.ut
def test_close_timeout_passed_to_client_config():
    config = FakeFrameLinkConfig(client={"close_timeout": 0.5})
    assert config.get_client_config().close_timeout == 0.5

    with pytest.raises(ValidationError):
        ClientSettings(close_timeout=0)
