"""Application configuration loaded from flags, environment variables and a YAML file."""

from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, SecretStr, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

# Server modes (module-level so the CLI and server bootstrap can share them).
GRPC_SERVER_MODE = "grpc"
GRPC_GATEWAY_SERVER_MODE = "grpc-gateway"
HTTP_SERVER_MODE = "http"
AVAILABLE_SERVER_MODES = (GRPC_SERVER_MODE, GRPC_GATEWAY_SERVER_MODE, HTTP_SERVER_MODE)

DEFAULT_CONFIG_NAME = "mb-apiserver.yaml"
DEFAULT_CONFIG_FILES = (
    Path.home() / ".miniblog" / DEFAULT_CONFIG_NAME,
    Path(DEFAULT_CONFIG_NAME),
)

JWT_KEY_MIN_LEN = 6


def _validate_addr(v: str, name: str) -> str:
    host, sep, port = v.strip().rpartition(":")
    if not sep or not port.isdigit() or not 0 <= int(port) < 65536:
        raise ValueError(f"{name} must be of the form host:port (e.g. 0.0.0.0:5555)")
    return f"{host or '0.0.0.0'}:{port}"


class HTTPOptions(BaseModel):
    """Listen address of the REST / gateway server."""

    addr: str = "0.0.0.0:5555"

    @field_validator("addr")
    @classmethod
    def validate_addr(cls, v: str) -> str:
        return _validate_addr(v, "http.addr")


class GRPCOptions(BaseModel):
    """Listen address and worker pool size of the gRPC server."""

    addr: str = "0.0.0.0:6666"
    max_workers: int = 32

    @field_validator("addr")
    @classmethod
    def validate_addr(cls, v: str) -> str:
        return _validate_addr(v, "grpc.addr")

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v: int) -> int:
        if v < 1 or v > 1024:
            raise ValueError("grpc.max_workers must be between 1 and 1024")
        return v


class TLSOptions(BaseModel):
    """Server certificate used by both HTTP and gRPC listeners when enabled."""

    use_tls: bool = False
    cert: str = ""
    key: str = ""

    @model_validator(mode="after")
    def validate_files(self) -> "TLSOptions":
        if not self.use_tls:
            return self
        for name in ("cert", "key"):
            path = getattr(self, name)
            if not path:
                raise ValueError(f"tls.{name} must be set when tls.use_tls is true")
            if not Path(path).is_file():
                raise ValueError(f"tls.{name} file does not exist: {path}")
        return self


class MySQLOptions(BaseModel):
    """MySQL DSN components and connection pool limits."""

    addr: str = "127.0.0.1:3306"
    username: str = "miniblog"
    password: SecretStr = SecretStr("miniblog1234")
    database: str = "miniblog"
    max_idle_connections: int = 100
    max_open_connections: int = 100
    max_connection_life_time: timedelta = timedelta(seconds=10)
    log_level: int = 1

    @field_validator("addr")
    @classmethod
    def validate_addr(cls, v: str) -> str:
        return _validate_addr(v, "mysql.addr")

    @field_validator("max_idle_connections", "max_open_connections")
    @classmethod
    def validate_pool(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MySQL connection pool sizes must be at least 1")
        return v

    def dsn(self) -> str:
        password = self.password.get_secret_value()
        return (
            f"mysql+pymysql://{self.username}:{password}@{self.addr}/{self.database}"
            "?charset=utf8mb4"
        )


class JWTOptions(BaseModel):
    """Signing key, identity claim name and lifetime of issued tokens."""

    key: SecretStr = SecretStr("Rtg8BPKNEf2mB4mgvKONGPZZQSaJWNLijxR42qRgq0iBb5")
    identity_key: str = "identityKey"
    expiration: timedelta = timedelta(hours=2)

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: SecretStr) -> SecretStr:
        if len(v.get_secret_value().strip()) < JWT_KEY_MIN_LEN:
            raise ValueError(f"jwt.key must be at least {JWT_KEY_MIN_LEN} characters long")
        return v

    @field_validator("identity_key")
    @classmethod
    def validate_identity_key(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("jwt.identity_key must be set and non-empty")
        return v.strip()

    @field_validator("expiration")
    @classmethod
    def validate_expiration(cls, v: timedelta) -> timedelta:
        if v <= timedelta(0):
            raise ValueError("jwt.expiration must be positive")
        return v


class Settings(BaseSettings):
    """Validated server settings. Flags > env (MINIBLOG_*) > .env > YAML file."""

    model_config = SettingsConfigDict(
        env_prefix="MINIBLOG_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file=DEFAULT_CONFIG_FILES,
        extra="ignore",
        case_sensitive=False,
    )

    server_mode: Literal["grpc", "grpc-gateway", "http"] = GRPC_GATEWAY_SERVER_MODE
    log_level: str = "INFO"
    log_format: str = (
        "%(asctime)s %(levelname)s %(name)s request_id=%(request_id)s "
        "user_id=%(user_id)s %(message)s"
    )

    http: HTTPOptions = HTTPOptions()
    grpc: GRPCOptions = GRPCOptions()
    tls: TLSOptions = TLSOptions()
    mysql: MySQLOptions = MySQLOptions()
    jwt: JWTOptions = JWTOptions()

    # Overrides the MySQL DSN when set (e.g. sqlite:///miniblog.db for local runs).
    database_url: str | None = None

    # Interval for reloading casbin policies from the database.
    authz_reload_interval: float = 10.0
    # Upper bound on graceful shutdown of the HTTP and gRPC servers.
    shutdown_timeout: float = 10.0

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
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @field_validator("server_mode", mode="before")
    @classmethod
    def validate_server_mode(cls, v: str) -> str:
        # "gin" is the historical name of the plain HTTP mode.
        v = str(v).strip().lower()
        if v == "gin":
            return HTTP_SERVER_MODE
        if v not in AVAILABLE_SERVER_MODES:
            raise ValueError(f"server_mode must be one of {', '.join(AVAILABLE_SERVER_MODES)}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("log_level must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return level

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("authz_reload_interval", "shutdown_timeout")
    @classmethod
    def validate_positive_seconds(cls, v: float) -> float:
        if v <= 0 or v > 3600:
            raise ValueError("intervals must be greater than 0 and at most 3600 seconds")
        return v

    @property
    def sqlalchemy_url(self) -> str:
        """Database URL handed to SQLAlchemy."""
        return self.database_url or self.mysql.dsn()


def load_settings(config_file: str | None = None, **overrides: object) -> Settings:
    """
    Build settings from an explicit YAML file (or the default search paths),
    environment and .env. Keyword overrides (command-line flags) win over all.
    """
    if not config_file:
        return Settings(**overrides)

    class FileSettings(Settings):
        model_config = SettingsConfigDict(yaml_file=config_file)

    return FileSettings(**overrides)


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance built from the default sources."""
    return Settings()
