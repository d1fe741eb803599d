"""OpenTelemetry access.

sphinxql only depends on the OpenTelemetry API; spans are no-ops until the
application installs an SDK tracer provider.
"""

from typing import Optional

from opentelemetry import trace
from opentelemetry.trace import Tracer

from sphinxql.__version__ import __version__

__all__ = [
    "get_tracer",
]


def get_tracer(name: str, version: Optional[str] = None) -> Tracer:
    """Tracer for ``name``, versioned with the installed sphinxql release by default."""
    return trace.get_tracer(name, version or __version__)
