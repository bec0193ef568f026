"""
One build invocation: collect the build output and the public directory
into an AssetRegistry, then emit the header once everything is in.
"""

import enum
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from . import emitter
from .config import PluginConfig
from .log import Trace, log_error, log_message
from .registry import Asset, AssetRegistry, MimeLookup


class BuildError(RuntimeError):
    pass


class BuildState(enum.Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    RENDERING = "rendering"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class BuildArtifact:
    """A file produced by the web build. `filename` is relative to the output dir."""

    filename: str
    content: Union[str, bytes]


@dataclass
class BuildResult:
    state: BuildState
    assets: List[Asset] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    collisions: List[Tuple[str, str, str]] = field(default_factory=list)
    output_path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is BuildState.DONE


def public_artifacts(public_dir: Union[str, Path]) -> List[BuildArtifact]:
    """Direct child files of `public_dir`, sorted by name. Subdirectories are ignored."""
    public_dir = Path(public_dir)
    return [
        BuildArtifact(path.name, path.read_bytes())
        for path in sorted(public_dir.iterdir(), key=lambda p: p.name)
        if path.is_file()
    ]


class BuildContext:
    """
    State for a single build. Create one per invocation and drop it after
    emit(); nothing is shared between builds.
    """

    def __init__(
        self,
        out_dir: Union[str, Path],
        config: Optional[PluginConfig] = None,
        mime_lookup: Optional[MimeLookup] = None,
    ):
        self.out_dir = Path(out_dir)
        self.config = config or PluginConfig()
        self.trace = Trace(self.config.logging)
        self.registry = AssetRegistry(
            mime_lookup=mime_lookup,
            compresslevel=self.config.compresslevel,
            unique_identifiers=self.config.unique_identifiers,
            trace=self.trace,
        )
        self.state = BuildState.IDLE

    def _require_collecting(self):
        if self.state is BuildState.IDLE:
            self.state = BuildState.COLLECTING
        elif self.state is not BuildState.COLLECTING:
            raise BuildError(f"Cannot register assets once the build is {self.state.value}")

    def register(self, artifacts: Iterable[Optional[BuildArtifact]]):
        """
        Register artifacts in order. With jobs > 1 compression runs in a
        thread pool; insertion still follows the input order.
        """
        self._require_collecting()
        items = [a for a in artifacts if a is not None]
        for artifact in items:
            self.trace(f"Processing {artifact.filename}")

        def prepare(artifact):
            return self.registry.prepare(artifact.filename, artifact.content)

        if self.config.jobs > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=self.config.jobs) as executor:
                prepared = list(executor.map(prepare, items))
        else:
            prepared = [prepare(a) for a in items]

        for p in prepared:
            self.registry.add(p)

    def register_public(self, public_dir: Union[str, Path]):
        self.register(public_artifacts(public_dir))

    def _fail(self, message) -> BuildResult:
        self.state = BuildState.FAILED
        log_error(message)
        result = self._result(error=message)
        if self.config.strict:
            raise BuildError(message)
        return result

    def _result(self, output_path=None, error=None) -> BuildResult:
        return BuildResult(
            state=self.state,
            assets=self.registry.snapshot(),
            skipped=list(self.registry.skipped),
            collisions=list(self.registry.identifiers.collisions),
            output_path=output_path,
            error=error,
        )

    def emit(self) -> BuildResult:
        """Render and write the header. May only be called once."""
        if self.state not in (BuildState.IDLE, BuildState.COLLECTING):
            raise BuildError(f"Build already {self.state.value}")

        for identifier, first, second in self.registry.identifiers.collisions:
            log_message(f"Identifier {identifier} is shared by {first} and {second}")

        if self.config.strict and self.registry.skipped:
            return self._fail(
                f"No mime type found for {len(self.registry.skipped)} file(s): "
                + ", ".join(self.registry.skipped)
            )

        log_message("Creating ESP output")
        self.state = BuildState.RENDERING
        try:
            text = emitter.render_header(self.registry.snapshot(), self.config.template)
        except emitter.RenderError as e:
            return self._fail(f"Error rendering {emitter.OUTPUT_NAME}: {e}")

        self.state = BuildState.WRITING
        output_path = emitter.write_header(self.out_dir, text)
        self.state = BuildState.DONE
        log_message(f"Wrote {output_path}")
        return self._result(output_path=output_path)


def run_build(
    out_dir: Union[str, Path],
    artifacts: Iterable[Optional[BuildArtifact]],
    config: Optional[PluginConfig] = None,
    mime_lookup: Optional[MimeLookup] = None,
) -> BuildResult:
    """
    Build the header for `artifacts`, followed by the public directory
    when `include_public` is set. Public files register last, so they
    replace build artifacts with the same name.
    """
    context = BuildContext(out_dir, config, mime_lookup)
    context.register(artifacts)
    public_dir = context.config.public_dir
    if context.config.include_public and public_dir is not None:
        context.register_public(public_dir)
    return context.emit()
