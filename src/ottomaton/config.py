"""
Engine options and environment-driven configuration.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict

COMMON_ACTIONS_ENV = "OTTOMATON_COMMON"
LOG_LEVEL_ENV = "OTTOMATON_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


class OttomatonOptions(BaseModel):
    """
    Options for one engine.

    Unknown keys are kept so action generators can read their own settings,
    e.g. ``engine.options.base_url``.
    """

    model_config = ConfigDict(extra="allow")

    common: bool = True


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    val = environ.get(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def load_options(env: Optional[Mapping[str, str]] = None, **overrides: Any) -> OttomatonOptions:
    environ = env if env is not None else os.environ
    values: dict[str, Any] = {"common": _env_bool(environ, COMMON_ACTIONS_ENV, True)}
    values.update(overrides)
    return OttomatonOptions(**values)


def coerce_options(options: OttomatonOptions | Mapping[str, Any] | None, **overrides: Any) -> OttomatonOptions:
    if options is None:
        return load_options(**overrides)
    if isinstance(options, OttomatonOptions):
        if not overrides:
            return options
        return options.model_copy(update=overrides)
    return load_options(**{**dict(options), **overrides})


def get_log_level(env: Optional[Mapping[str, str]] = None) -> int:
    environ = env if env is not None else os.environ
    name = str(environ.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING
