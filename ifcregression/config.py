"""Global configuration: file naming constants and layered run settings."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# Reports are named <prefix>_<timestamp>.csv and written into the scanned root
REPORT_PREFIX = "IfcRegression"
REPORT_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

# Source formats handed to the conversion collaborator
SOURCE_EXTENSIONS = (".ifc",)
SUPPORTED_EXTENSIONS = (".ifc", ".ifczip", ".ifcxml")

# Derived artifacts written next to each source file.
# None of these may end in a source extension or discovery would pick them up.
CONVERTED_SUFFIX = ".cache"
SCENE_SUFFIX = ".scene.obj"
LOG_SUFFIX = ".log"

CONFIG_FILE_NAME = ".ifcregression.json"
ENV_PREFIX = "IFCREGRESSION_"


class RegressionSettings(BaseModel):
    """Settings for one regression run."""

    caching: bool = False
    recursive: bool = True
    generate_scene: bool = False
    extensions: tuple[str, ...] = SOURCE_EXTENSIONS
    report_prefix: str = REPORT_PREFIX
    log_level: str = "INFO"

    @field_validator("extensions", mode="before")
    @classmethod
    def _normalise_extensions(cls, value: Any) -> tuple[str, ...]:
        if isinstance(value, str):
            value = value.split(",")
        exts = []
        for ext in value:
            ext = str(ext).strip().lower()
            if not ext:
                continue
            exts.append(ext if ext.startswith(".") else f".{ext}")
        return tuple(exts) or SOURCE_EXTENSIONS

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> str:
        return str(value).strip().upper() or "INFO"


_BOOL_TRUE = {"1", "true", "yes", "on"}

# Environment variable -> settings field
_ENV_KEYS: dict[str, str] = {
    "CACHING": "caching",
    "RECURSIVE": "recursive",
    "GENERATE_SCENE": "generate_scene",
    "EXTENSIONS": "extensions",
    "REPORT_PREFIX": "report_prefix",
    "LOG_LEVEL": "log_level",
}

_BOOL_FIELDS = {"caching", "recursive", "generate_scene"}


def load_settings(root: str | Path | None = None, **overrides: Any) -> RegressionSettings:
    """Load merged settings: defaults -> config file -> env vars -> overrides.

    Parameters
    ----------
    root:
        Directory holding an optional ``.ifcregression.json``.
    overrides:
        Explicit values (typically from the command line); ``None`` values
        are ignored so unset options do not mask lower layers.
    """
    values: dict[str, Any] = {}

    if root is not None:
        config_json = Path(root) / CONFIG_FILE_NAME
        if config_json.is_file():
            try:
                data = json.loads(config_json.read_text(encoding="utf-8"))
                values.update({k: v for k, v in data.items() if k in RegressionSettings.model_fields})
            except (json.JSONDecodeError, OSError, AttributeError):
                logger.debug("Could not read %s", config_json, exc_info=True)

    for suffix, field in _ENV_KEYS.items():
        env_val = os.environ.get(ENV_PREFIX + suffix)
        if env_val is None:
            continue
        if field in _BOOL_FIELDS:
            values[field] = env_val.strip().lower() in _BOOL_TRUE
        else:
            values[field] = env_val

    values.update({k: v for k, v in overrides.items() if v is not None})
    return RegressionSettings(**values)
