"""
Settings for the access control engine.
Values are read from the environment (and .env) once per process.
"""

import os
from typing import List, Optional

import dotenv
from loguru import logger
from pydantic import BaseModel, Field, field_validator

DEFAULT_LOCALE = "en"
RESTRICTED_COLLECTIONS = ["managers", "clients", "payload-jobs"]


class AccessSettings(BaseModel):
    """Access control settings"""

    default_locale: str = Field(DEFAULT_LOCALE, min_length=1)
    restricted_collections: List[str] = Field(
        default_factory=lambda: list(RESTRICTED_COLLECTIONS),
        description="Collections only admins can reach",
    )
    roles_file: Optional[str] = Field(
        None,
        description="YAML file overriding the built-in role tables",
    )

    @field_validator("restricted_collections", mode="before")
    def split_collections(cls, v):
        if isinstance(v, str):
            return [c.strip() for c in v.split(",") if c.strip()]
        return v

    @classmethod
    def from_env(cls) -> "AccessSettings":
        """Build settings from RBAC_* environment variables"""
        dotenv.load_dotenv()

        values = {}
        if os.getenv("RBAC_DEFAULT_LOCALE"):
            values["default_locale"] = os.getenv("RBAC_DEFAULT_LOCALE")
        if os.getenv("RBAC_RESTRICTED_COLLECTIONS"):
            values["restricted_collections"] = os.getenv("RBAC_RESTRICTED_COLLECTIONS")
        if os.getenv("RBAC_ROLES_FILE"):
            values["roles_file"] = os.getenv("RBAC_ROLES_FILE")

        try:
            settings = cls(**values)
        except ValueError as e:
            logger.error(f"[RBAC] Invalid access control settings: {e}")
            raise

        logger.debug(
            f"[RBAC] Settings loaded - default locale: {settings.default_locale}, "
            f"restricted: {settings.restricted_collections}"
        )
        return settings


# Global settings instance
_settings: Optional[AccessSettings] = None


def get_settings() -> AccessSettings:
    """Get process-wide settings, loading them on first use"""
    global _settings

    if _settings is None:
        _settings = AccessSettings.from_env()
    return _settings


def reset_settings() -> None:
    """Forget cached settings (next call reloads from the environment)"""
    global _settings
    _settings = None
