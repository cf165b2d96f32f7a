import ssl
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from typing import Annotated
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from pydantic_core.core_schema import ValidationInfo

from framelink.bootstrap.config.loader import get_configfile
from framelink.core.models.config import ClientConfig
from framelink.core.transport.framing import MAX_PAYLOAD_SIZE


class ServerSettings(BaseModel):
    host: Annotated[
        str,
        Field(
            description="Host name or IP address of the server to connect to.",
            default="127.0.0.1"
        )
    ]

    port: Annotated[
        int,
        Field(
            description="TCP port of the server.",
            default=7000,
            ge=0,
            le=0xFFFF,
        )
    ]


class TLSSettings(BaseModel):
    enabled: Annotated[
        bool,
        Field(
            description="Wrap the connection in TLS before the handshake.",
            default=False
        )
    ]

    cafile: Annotated[
        Path | None,
        Field(
            description=(
                "CA certificate (PEM) used to verify the server.\n"
                "When omitted the system trust store is used."
            ),
            default=None
        )
    ]

    certfile: Annotated[
        Path | None,
        Field(
            description="Client certificate (PEM), for servers requiring mutual TLS.",
            default=None
        )
    ]

    keyfile: Annotated[
        Path | None,
        Field(
            description="Private key (PEM) matching certfile.",
            default=None
        )
    ]

    server_hostname: Annotated[
        str | None,
        Field(
            description="Name checked against the server certificate. Defaults to server.host.",
            default=None
        )
    ]

    @field_validator("cafile", "certfile", "keyfile")
    @classmethod
    def validate_path(cls, v: Path | None, _: ValidationInfo) -> Path | None:
        if v is not None and not v.exists():
            raise ValueError(f"Path {v} does not exist.")
        return v


class ClientSettings(BaseModel):
    max_message_size: Annotated[
        int | None,
        Field(
            description=(
                "Largest payload accepted from the server, in bytes.\n"
                "Larger frames close the connection. Unset means no limit\n"
                "beyond the protocol maximum."
            ),
            default=None,
            ge=1,
            le=MAX_PAYLOAD_SIZE,
        )
    ]

    connect_timeout: Annotated[
        float | None,
        Field(
            description="Maximum time in seconds to establish the TCP connection.",
            default=None,
            gt=0,
        )
    ]

    close_timeout: Annotated[
        float,
        Field(
            description="Maximum time in seconds to flush pending output once the server hangs up.",
            default=5.0,
            gt=0,
        )
    ]


class FrameLinkConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FRAMELINK_",
        env_nested_delimiter="__",
        extra="allow"
    )

    server: Annotated[
        ServerSettings,
        Field(
            description="Remote endpoint to connect to.",
            default_factory=ServerSettings
        )
    ]

    tls: Annotated[
        TLSSettings,
        Field(
            description="Optional TLS layer under the framing protocol.",
            default_factory=TLSSettings
        )
    ]

    client: Annotated[
        ClientSettings,
        Field(
            description="Limits applied by the client to the connection.",
            default_factory=ClientSettings
        )
    ]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: tuple[PydanticBaseSettingsSource, ...] = (init_settings, env_settings)
        configfile = get_configfile()
        if configfile is not None:
            sources += (YamlConfigSettingsSource(settings_cls, yaml_file=configfile),)
        return sources

    def get_ssl_ctx(self) -> ssl.SSLContext | None:
        if not self.tls.enabled:
            return None

        ctx = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
        if self.tls.cafile is not None:
            ctx.load_verify_locations(cafile=self.tls.cafile)
        if self.tls.certfile is not None:
            ctx.load_cert_chain(
                certfile=self.tls.certfile,
                keyfile=self.tls.keyfile
            )

        return ctx

    def get_client_config(self) -> ClientConfig:
        return ClientConfig(
            ssl_ctx=self.get_ssl_ctx(),
            server_hostname=self.tls.server_hostname,
            max_message_size=self.client.max_message_size,
            connect_timeout=self.client.connect_timeout,
            close_timeout=self.client.close_timeout,
        )
