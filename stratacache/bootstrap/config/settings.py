from typing import Annotated

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from stratacache.bootstrap.config.loader import get_configfile
from stratacache.core.models.provider import ConnectionType, KeyLayout, PerformanceMode
from stratacache.core.storage.codec import GLOB_CHARS


class RedisSettings(BaseModel):
    host: Annotated[
        str,
        Field(
            description="Redis host for a standalone connection.",
            default="127.0.0.1"
        )
    ]

    port: Annotated[
        int,
        Field(
            description="Redis port for a standalone connection.",
            default=6379
        )
    ]

    db: Annotated[
        int,
        Field(
            description=(
                "Logical database index for a standalone connection.\n"
                "Ignored in cluster mode, where only database 0 exists."
            ),
            default=0
        )
    ]

    username: Annotated[
        str | None,
        Field(
            description="ACL username, when the server requires one.",
            default=None
        )
    ]

    password: Annotated[
        str | None,
        Field(
            description="Password (or ACL password) used to authenticate.",
            default=None
        )
    ]

    ssl: Annotated[
        bool,
        Field(
            description="Connect over TLS.",
            default=False
        )
    ]

    socket_timeout: Annotated[
        float | None,
        Field(
            description=(
                "Timeout in seconds for a single request on the socket.\n"
                "None waits forever. Timeouts surface as StoreConnectionError."
            ),
            default=None
        )
    ]

    nodes: Annotated[
        list[str],
        Field(
            description=(
                "Cluster startup nodes as 'host:port' entries.\n"
                "Required in cluster mode, ignored for standalone connections.\n"
                "Only used to discover the cluster topology at connection time."
            ),
            default_factory=list
        )
    ]

    @field_validator("nodes")
    @classmethod
    def validate_nodes(cls, v: list[str]) -> list[str]:
        for node in v:
            host, sep, port = node.rpartition(":")
            if not sep or not host or not port.isdigit():
                raise ValueError(f"Node {node!r} is not a 'host:port' address")
        return v


class ProviderSettings(BaseModel):
    connection: Annotated[
        ConnectionType,
        Field(
            description="Redis topology: 'standalone' or 'cluster'.",
            default=ConnectionType.standalone
        )
    ]

    layout: Annotated[
        KeyLayout,
        Field(
            description=(
                "How keyspace, storage and key are laid out on redis.\n"
                "'hash'  → one hash per keyspace:storage, keys are its fields.\n"
                "'flat'  → one string per keyspace:storage:key, scanned by pattern."
            ),
            default=KeyLayout.hash
        )
    ]

    prefix: Annotated[
        str | None,
        Field(
            description=(
                "Global prefix prepended to every redis key, followed by ':'.\n"
                "Lets several applications share one redis database."
            ),
            default=None
        )
    ]

    performance_mode: Annotated[
        PerformanceMode,
        Field(
            description=(
                "Value fetch strategy of scan operations.\n"
                "'fast'   → one batched request per scan.\n"
                "'saving' → one request per record, lower peak memory."
            ),
            default=PerformanceMode.fast
        )
    ]

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str | None) -> str | None:
        if v is not None and GLOB_CHARS.intersection(v):
            raise ValueError(f"Prefix {v!r} must not contain any of {''.join(sorted(GLOB_CHARS))}")
        return v


class StrataConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STRATA_",
        env_nested_delimiter="__",
        extra="allow"
    )

    redis: Annotated[
        RedisSettings,
        Field(
            description="Connection parameters handed to the redis client.",
            default_factory=RedisSettings
        )
    ]

    provider: Annotated[
        ProviderSettings,
        Field(
            description="Cache provider behavior: topology, key layout, prefix and scan mode.",
            default_factory=ProviderSettings
        )
    ]

    @model_validator(mode="after")
    def validate_topology(self) -> "StrataConfig":
        if self.provider.connection == ConnectionType.cluster and not self.redis.nodes:
            raise ValueError("Cluster connection requires at least one entry in redis.nodes")
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=get_configfile()),
        )
