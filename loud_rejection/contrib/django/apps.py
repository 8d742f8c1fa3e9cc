"""
Loud Rejection - Django App Configuration
===========================================
Installs loud rejection when Django finishes loading.

Rules:
- Runs once via ready()
- Skips under pytest (tests install their own instances)
- Configuration errors propagate and prevent startup
"""

import logging
import os
import sys

from django.apps import AppConfig

logger = logging.getLogger("loud_rejection.install")


def _is_pytest_context() -> bool:
    return (
        "PYTEST_CURRENT_TEST" in os.environ
        or "pytest" in sys.modules
    )


class LoudRejectionConfig(AppConfig):
    name = "loud_rejection.contrib.django"
    label = "loud_rejection"
    verbose_name = "Loud Rejection"

    def ready(self):
        if _is_pytest_context():
            logger.info("Loud rejection install skipped for test context.")
            return

        from loud_rejection.contrib.django.conf import install_from_settings
        install_from_settings()
