try:
    from ._version import __version__
except ImportError:
    __version__ = "unknown"

from .core import App
from .cli import main

__all__ = ["App", "main", "__version__"]
