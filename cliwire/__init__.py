__title__ = 'cliwire'
__license__ = 'MIT'
# Placeholder, kept in sync with pyproject.toml.
__version__ = "0.1.0"

from .converters import *
from .specs import *
from .matcher import *
from .formatter import *
from .commands import *
from .faults import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
))

version_info = VersionInfo(0, 1, 0, "alpha", 0)

__all__ = (
    "__title__",
    "__license__",
    "__version__",
    "version_info",
)

# Converter registry and composite helpers
__all__ += converters.__all__  # type: ignore[attr-defined]
# Parameter / CommandSpec declarations
__all__ += specs.__all__  # type: ignore[attr-defined]
# Token classification and option matching
__all__ += matcher.__all__  # type: ignore[attr-defined]
# Help rendering
__all__ += formatter.__all__  # type: ignore[attr-defined]
# Dispatcher, outcomes and entry points
__all__ += commands.__all__  # type: ignore[attr-defined]
# Fault codes, errors and warnings
__all__ += faults.__all__  # type: ignore[attr-defined]
