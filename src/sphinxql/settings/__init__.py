"""Settings for sphinxql built on Pydantic Settings.

Configuration sources (precedence order):
    1. Environment variables prefixed with ``SPHINX_``
    2. A ``.env`` file in the working directory
    3. Default values in code

Quick Start:
    >>> from sphinxql.settings import get_settings
    >>> settings = get_settings()
    >>> settings.url
    'mysql+pymysql://127.0.0.1:9306'
"""

from .base import SphinxQLBaseSettings
from .main import SphinxSettings, get_settings, reload_settings

__all__ = [
    "SphinxQLBaseSettings",
    "SphinxSettings",
    "get_settings",
    "reload_settings",
]
