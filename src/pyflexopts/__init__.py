"""pyflexopts - string-backed option store with typed, best-effort reads."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyflexopts")
except PackageNotFoundError:
    __version__ = "0+local"
from pyflexopts._coerce import Decoded, decode_value, encode_value
from pyflexopts.config import OptionsConfig
from pyflexopts.exceptions import (
    FlexOptionsError,
    OptionsConfigError,
    OptionsDecodeError,
    OptionsEncodeError,
)
from pyflexopts.options import FlexibleOptions

__all__ = [
    "__version__",
    "Decoded",
    "FlexOptionsError",
    "FlexibleOptions",
    "OptionsConfig",
    "OptionsConfigError",
    "OptionsDecodeError",
    "OptionsEncodeError",
    "decode_value",
    "encode_value",
]
