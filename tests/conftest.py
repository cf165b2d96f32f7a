import ssl
from dataclasses import dataclass
from pathlib import Path

import pytest
import yaml

from framelink.core.helpers.spawn import TaskSpawner
from framelink.infra.msgpack_serializer import MsgPackSerializer
from tests.fake.fake_client import RecordingProcessor
from tests.fake.fake_server import ServerScript
from tests.utils import generate_server_cert, write_pem


@dataclass
class TLSFiles:
    cafile: Path
    certfile: Path
    keyfile: Path


@pytest.fixture
def serializer():
    return MsgPackSerializer()


@pytest.fixture
def script():
    return ServerScript()


@pytest.fixture
def processor():
    return RecordingProcessor()


@pytest.fixture
def spawner():
    return TaskSpawner()


@pytest.fixture(scope="session")
def tls_files(tmp_path_factory) -> TLSFiles:
    ca_cert, server_key, server_cert = generate_server_cert()
    base = tmp_path_factory.mktemp("tls")

    files = TLSFiles(
        cafile=base / "ca.pem",
        certfile=base / "server.pem",
        keyfile=base / "server.key",
    )
    write_pem(ca_cert, files.cafile)
    write_pem(server_cert, files.certfile)
    write_pem(server_key, files.keyfile)
    return files


@pytest.fixture(scope="session")
def tls_contexts(tls_files) -> tuple[ssl.SSLContext, ssl.SSLContext]:
    server_ctx = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
    server_ctx.load_cert_chain(tls_files.certfile, tls_files.keyfile)

    client_ctx = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    client_ctx.load_verify_locations(cafile=tls_files.cafile)

    return server_ctx, client_ctx


@pytest.fixture
def config_file(tmp_path, tls_files, monkeypatch) -> Path:
    file = tmp_path / "framelink.yaml"
    data = {
        "server": {
            "host": "127.0.0.1",
            "port": 7001,
        },
        "tls": {
            "enabled": True,
            "cafile": str(tls_files.cafile),
        },
        "client": {
            "max_message_size": 4096,
            "connect_timeout": 2.5,
        },
    }
    file.write_text(yaml.dump(data))
    monkeypatch.setenv("TEST_FRAMELINKCONFIG", str(file))
    return file
