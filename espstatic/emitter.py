"""
Render the asset list into `_esp32/static_files.h`.

Rendering finishes before anything touches the filesystem, and the
header is replaced in a single step, so a failed build never leaves a
half-written file behind.
"""

import os
import tempfile
from pathlib import Path
from typing import List, Optional, Union

import jinja2

from .registry import Asset

OUTPUT_SUBDIR = "_esp32"
OUTPUT_NAME = "static_files.h"
DEFAULT_TEMPLATE = "static_files_h.j2"


class RenderError(Exception):
    pass


def c_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _environment(template: Optional[Path]) -> jinja2.Environment:
    if template is None:
        loader = jinja2.PackageLoader("espstatic", "templates")
    else:
        loader = jinja2.FileSystemLoader(str(Path(template).parent))
    env = jinja2.Environment(
        loader=loader,
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["c_string"] = c_string
    return env


def output_path_for(out_dir: Union[str, Path]) -> Path:
    return Path(out_dir) / OUTPUT_SUBDIR / OUTPUT_NAME


def render_header(assets: List[Asset], template: Optional[Path] = None) -> str:
    """Render the header text. Template problems are raised as RenderError."""
    name = DEFAULT_TEMPLATE if template is None else Path(template).name
    try:
        return _environment(template).get_template(name).render(files=list(assets))
    except jinja2.TemplateError as e:
        raise RenderError(f"{type(e).__name__}: {e}") from e


def _default_file_mode() -> int:
    # mkstemp creates 0600; give the header the mode a plain open() would
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_header(out_dir: Union[str, Path], text: str) -> Path:
    output_path = output_path_for(out_dir)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=".static_files_", suffix=".h", dir=output_path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.chmod(tmp_name, _default_file_mode())
        os.replace(tmp_name, output_path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise
    return output_path


