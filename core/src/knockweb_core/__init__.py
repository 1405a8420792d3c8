__version__ = "0.2.0"
PRODUCT_NAME = "KnockWeb"

from knockweb_core.config import CoreConfig, load_core_config  # noqa: E402
from knockweb_core.home import (  # noqa: E402
    KnockWebPaths,
    ensure_knockweb_layout,
    resolve_knockweb_home,
)

__all__ = [
    "PRODUCT_NAME",
    "CoreConfig",
    "KnockWebPaths",
    "__version__",
    "ensure_knockweb_layout",
    "load_core_config",
    "resolve_knockweb_home",
]
