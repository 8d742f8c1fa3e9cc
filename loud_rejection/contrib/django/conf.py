"""
Loud Rejection - Django Settings
==================================
Reads settings.LOUD_REJECTION and installs accordingly.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.conf import settings as django_settings
from django.core.exceptions import ImproperlyConfigured

from loud_rejection.installer import LoudRejection, get_default

logger = logging.getLogger("loud_rejection.install")

SETTING_NAME = "LOUD_REJECTION"

DEFAULTS: Dict[str, Any] = {
    "ENABLED": True,
    "EXIT_CODE": None,
}


def get_config(settings: Any = None) -> Dict[str, Any]:
    """Merge settings.LOUD_REJECTION over DEFAULTS."""
    if settings is None:
        settings = django_settings

    raw = getattr(settings, SETTING_NAME, None)
    if raw is None:
        return dict(DEFAULTS)

    if not isinstance(raw, dict):
        raise ImproperlyConfigured(
            f"{SETTING_NAME} must be a dict, got {type(raw).__name__}."
        )

    unknown = sorted(set(raw) - set(DEFAULTS))
    if unknown:
        raise ImproperlyConfigured(
            f"Unknown {SETTING_NAME} keys: {', '.join(unknown)}."
        )

    return {**DEFAULTS, **raw}


def install_from_settings(
    settings: Any = None, loud: Optional[LoudRejection] = None
) -> bool:
    """
    Install loud rejection as configured.

    Returns False when disabled. Exit-code configuration errors
    propagate, so a misconfigured project refuses to start.
    """
    config = get_config(settings)
    if not config["ENABLED"]:
        logger.info(f"Loud rejection disabled by settings.{SETTING_NAME}.")
        return False

    if loud is None:
        loud = get_default()
    loud.install(exit_code=config["EXIT_CODE"])
    return True
