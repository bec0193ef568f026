import mimetypes
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Union

from .compress import DEFAULT_COMPRESSLEVEL, optimize_asset
from .log import Trace, log_message
from .naming import IdentifierAllocator

MimeLookup = Callable[[str], Optional[str]]

# Built-in table only, so the result doesn't depend on the host's mime.types
_MIME_TYPES = mimetypes.MimeTypes()

# Web build outputs the built-in table is missing
WEB_TYPES = {
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".otf": "font/otf",
    ".ttf": "font/ttf",
    ".map": "application/json",
    ".gz": "application/gzip",
}
# Pre-compressed files are served as gzip, not as the type they wrap
_MIME_TYPES.encodings_map.pop(".gz", None)
for _ext, _type in WEB_TYPES.items():
    _MIME_TYPES.add_type(_type, _ext)


def default_mime_lookup(path: str) -> Optional[str]:
    mime_type, _ = _MIME_TYPES.guess_type(path, strict=False)
    return mime_type


def route_for(filename: str) -> str:
    return filename if filename.startswith("/") else "/" + filename


@dataclass(frozen=True)
class Asset:
    """One file the firmware serves."""

    route_path: str
    identifier: str
    mime_type: str
    encoded_contents: str
    compressed_size: int


@dataclass(frozen=True)
class PreparedAsset:
    source_path: str
    route_path: str
    mime_type: str
    encoded_contents: str
    compressed_size: int


def prepare_asset(
    source_path: str,
    raw_content: Union[str, bytes],
    route: Optional[str] = None,
    mime_lookup: MimeLookup = default_mime_lookup,
    compresslevel: int = DEFAULT_COMPRESSLEVEL,
) -> PreparedAsset:
    """
    Resolve the MIME type, then compress and format the content.

    An empty mime_type marks a file with no known content type. Holds no
    state, so it's safe to call from worker threads.
    """
    route_path = route_for(route if route is not None else source_path)
    mime_type = mime_lookup(route_path)
    if not mime_type:
        return PreparedAsset(source_path, route_path, "", "", 0)

    encoded, size = optimize_asset(raw_content, compresslevel)
    return PreparedAsset(source_path, route_path, mime_type, encoded, size)


class AssetRegistry:
    """
    Ordered assets for one build, keyed by route path.

    Registering a route that already exists replaces the asset but keeps
    its original position.
    """

    def __init__(
        self,
        mime_lookup: Optional[MimeLookup] = None,
        compresslevel: int = DEFAULT_COMPRESSLEVEL,
        unique_identifiers: bool = False,
        trace: Optional[Trace] = None,
    ):
        self.mime_lookup = mime_lookup or default_mime_lookup
        self.compresslevel = compresslevel
        self.identifiers = IdentifierAllocator(unique=unique_identifiers)
        self.trace = trace or Trace(False)
        self.skipped: List[str] = []
        self._assets: Dict[str, Asset] = {}

    def __len__(self):
        return len(self._assets)

    def __contains__(self, route_path):
        return route_path in self._assets

    def get(self, route_path: str) -> Optional[Asset]:
        return self._assets.get(route_path)

    def prepare(self, source_path, raw_content, route=None) -> PreparedAsset:
        return prepare_asset(
            source_path,
            raw_content,
            route,
            mime_lookup=self.mime_lookup,
            compresslevel=self.compresslevel,
        )

    def add(self, prepared: PreparedAsset) -> Optional[Asset]:
        if not prepared.mime_type:
            log_message(f"No mime type found for {prepared.route_path}")
            if prepared.route_path not in self.skipped:
                self.skipped.append(prepared.route_path)
            return None

        identifier = self.identifiers.allocate(prepared.source_path)
        asset = Asset(
            route_path=prepared.route_path,
            identifier=identifier,
            mime_type=prepared.mime_type,
            encoded_contents=prepared.encoded_contents,
            compressed_size=prepared.compressed_size,
        )
        if prepared.route_path in self._assets:
            self.trace(f"Replacing {prepared.route_path}")
        self._assets[prepared.route_path] = asset
        self.trace(
            f"  {prepared.route_path} -> {identifier} "
            f"({prepared.mime_type}, {prepared.compressed_size:,d} bytes)"
        )
        return asset

    def register_asset(self, source_path, raw_content, route=None) -> Optional[Asset]:
        """Compress, format and store one file. Returns None if it was skipped."""
        return self.add(self.prepare(source_path, raw_content, route))

    def snapshot(self) -> List[Asset]:
        return list(self._assets.values())
