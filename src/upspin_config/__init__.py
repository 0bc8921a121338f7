"""Immutable, layered client configuration for Upspin."""

from .config import (
    Config,
    new,
    set_cache_endpoint,
    set_dir_endpoint,
    set_factotum,
    set_key_endpoint,
    set_packing,
    set_store_endpoint,
    set_user_name,
    set_value,
    set_value_map,
)
from .endpoint import Endpoint, Transport, parse_endpoint
from .errors import ERR_NO_FACTOTUM, ConfigError, Kind
from .flags import ArgparseFlags, set_flag_values
from .loader import LoadResult, Loader, from_file, init_config
from .packing import Packing

__all__ = [
    "ArgparseFlags",
    "Config",
    "ConfigError",
    "ERR_NO_FACTOTUM",
    "Endpoint",
    "Kind",
    "LoadResult",
    "Loader",
    "Packing",
    "Transport",
    "from_file",
    "init_config",
    "new",
    "parse_endpoint",
    "set_cache_endpoint",
    "set_dir_endpoint",
    "set_factotum",
    "set_flag_values",
    "set_key_endpoint",
    "set_packing",
    "set_store_endpoint",
    "set_user_name",
    "set_value",
    "set_value_map",
]
__version__ = "0.1.0"
