"""Server configuration from environment variables and the db properties file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import quote_plus

logger = logging.getLogger(__name__)

DEFAULT_PROPERTIES = "conf/db.properties"


def load_properties(path: str) -> Dict[str, str]:
    """Read a Java-style ``.properties`` file into a dict.

    Supports ``key=value`` and ``key: value`` lines and ``#`` / ``!``
    comments. A missing file yields an empty dict.
    """
    props: Dict[str, str] = {}
    file = Path(path)
    if not file.is_file():
        return props
    for raw in file.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line[0] in "#!":
            continue
        # Split on whichever separator comes first
        seps = [i for i in (line.find("="), line.find(":")) if i != -1]
        if not seps:
            props[line] = ""
            continue
        idx = min(seps)
        props[line[:idx].strip()] = line[idx + 1:].strip()
    return props


def build_mongo_uri(props: Dict[str, str]) -> str:
    """Assemble ``{prefix}{user}:{pwd}{dbUrl}{params}`` from db.* properties.

    The password is URL-encoded. Returns "" when no prefix or host is set.
    """
    prefix = props.get("db.prefix", "")
    url = props.get("db.dbUrl", "")
    if not prefix or not url:
        return ""
    user = props.get("db.user", "")
    pwd = quote_plus(props.get("db.pwd", ""))
    params = props.get("db.params", "")
    return f"{prefix}{user}:{pwd}{url}{params}"


@dataclass
class Settings:
    """Application settings loaded from environment."""

    database_url: str = ""
    db_name: str = ""
    host: str = "0.0.0.0"
    port: int = 8080
    images_dir: str = "images"

    # Observability
    metrics_enabled: bool = True
    log_format: str = "pretty"  # "json" or "pretty"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, properties_path: Optional[str] = None) -> Settings:
        props = load_properties(
            properties_path or os.environ.get("DB_PROPERTIES", DEFAULT_PROPERTIES)
        )
        return cls(
            database_url=os.environ.get("DATABASE_URL") or build_mongo_uri(props),
            db_name=os.environ.get("DB_NAME") or props.get("db.dbName", ""),
            host=os.environ.get("HOST", "0.0.0.0"),
            port=int(os.environ.get("PORT", "8080")),
            images_dir=os.environ.get("IMAGES_DIR", "images"),
            metrics_enabled=os.environ.get("METRICS_ENABLED", "true").lower() in ("true", "1", "yes"),
            log_format=os.environ.get("LOG_FORMAT", "pretty"),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )


settings = Settings.from_env()
