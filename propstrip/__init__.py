"""propstrip: remove or wrap React ``propTypes`` in JavaScript / TypeScript sources."""

from .models import RewriteResult, RewriteStatus
from .options import ConfigurationError, Mode, RewriteOptions, normalize_options
from .transform import rewrite

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "Mode",
    "RewriteOptions",
    "RewriteResult",
    "RewriteStatus",
    "normalize_options",
    "rewrite",
    "__version__",
]
