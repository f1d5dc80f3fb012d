import os
from pathlib import Path
from typing import Optional

from environs import Env  # type: ignore
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

env = Env()

VERSION = "0.1.0"


def find_env_file():
    # env file: default to current dir, else home dir
    env_file = os.path.join(os.getcwd(), ".env")
    if not os.path.isfile(env_file):
        env_file = os.path.join(str(Path.home()), ".zapdesk", ".env")
    if os.path.isfile(env_file):
        env.read_env(env_file, recurse=False, override=True)
    else:
        env_file = ""
    return env_file


class ZapdeskSettings(BaseSettings):
    env_file: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(
        env_file=find_env_file() or None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )


class EnvSettings(ZapdeskSettings):
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")


class LnurlSettings(ZapdeskSettings):
    default_lightning_address: str = Field(
        default="covertbrian73@walletofsatoshi.com",
        title="Default lightning address",
        description="Address used when the directory has none for a payee.",
    )
    lnurl_timeout: float = Field(
        default=10.0,
        gt=0,
        title="LNURL timeout",
        description="Timeout in seconds for discovery and invoice requests.",
    )
    lnurl_cache_ttl: float = Field(
        default=5 * 60,
        ge=0,
        title="Pay parameters cache TTL",
        description="Seconds a discovered payRequest stays fresh.",
    )
    lnurl_cache_max_entries: int = Field(default=256, gt=0)
    lnurl_verify_tls: bool = Field(default=True)
    invoice_min_length: int = Field(
        default=20,
        gt=0,
        title="Minimum invoice length",
        description="Shortest payment request accepted from a callback.",
    )


class QRSettings(ZapdeskSettings):
    qr_min_size_px: int = Field(default=256, gt=0)
    qr_border: int = Field(default=4, ge=0)
    qr_error_correction: str = Field(default="M", pattern="^[LMQH]$")


class DirectorySettings(ZapdeskSettings):
    zendesk_subdomain: str = Field(default="support.knowall.ai")
    zendesk_email: Optional[str] = Field(default=None)
    zendesk_api_token: Optional[str] = Field(default=None)


class ApiSettings(ZapdeskSettings):
    api_host: str = Field(default="127.0.0.1")
    api_port: int = Field(default=4449)


class Settings(
    EnvSettings,
    LnurlSettings,
    QRSettings,
    DirectorySettings,
    ApiSettings,
    ZapdeskSettings,
):
    version: str = Field(default=VERSION)


settings = Settings()


def startup_settings_tasks():
    # set env_file (this does not affect the settings module, it's just for reading)
    settings.env_file = find_env_file()


startup_settings_tasks()
