"""
Loud Rejection - Django Integration
=====================================
Add "loud_rejection.contrib.django" to INSTALLED_APPS.

Settings:
    LOUD_REJECTION = {
        "ENABLED": True,     # install at startup
        "EXIT_CODE": None,   # override for the default exit code of 1
    }
"""
