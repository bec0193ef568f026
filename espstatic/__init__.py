"""Embed a web build into an ESP32 firmware as gzip-compressed C arrays."""

from .compress import compress_bytes, format_array, optimize_asset, parse_array
from .config import PluginConfig
from .naming import sanitize_identifier
from .pipeline import BuildArtifact, BuildContext, BuildError, BuildResult, BuildState, run_build
from .registry import Asset, AssetRegistry

__version__ = "0.1.0"

__all__ = [
    "Asset",
    "AssetRegistry",
    "BuildArtifact",
    "BuildContext",
    "BuildError",
    "BuildResult",
    "BuildState",
    "PluginConfig",
    "compress_bytes",
    "format_array",
    "optimize_asset",
    "parse_array",
    "run_build",
    "sanitize_identifier",
]
