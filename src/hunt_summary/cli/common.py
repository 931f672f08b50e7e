from __future__ import annotations

from typing import Any

from hunt_summary.core.config import Settings, settings
from hunt_summary.core.logging import configure_logging


def resolve_settings(**overrides: Any) -> Settings:
    """
    Apply CLI overrides on top of environment/.env settings.
    Options left unset on the command line (None) keep their configured value.
    """
    update = {k: v for k, v in overrides.items() if v is not None}
    resolved = settings.model_copy(update=update)
    configure_logging(resolved.log_level)
    return resolved
