import os
import stat

import pytest

from espstatic.emitter import RenderError, c_string, output_path_for, render_header, write_header
from espstatic.registry import AssetRegistry


@pytest.fixture
def assets():
    registry = AssetRegistry()
    registry.register_asset("index.html", "<h1>hi</h1>")
    registry.register_asset("assets/app-1.js", "console.log(1)")
    return registry.snapshot()


def test_render_lists_every_asset(assets):
    text = render_header(assets)
    assert "namespace static_files" in text
    assert "const uint8_t f_index_html_contents[] PROGMEM = {\n0x1f, 0x8b" in text
    assert f"f_index_html_size PROGMEM = {assets[0].compressed_size};" in text
    assert '{"/index.html", ' in text
    assert '{"/index.html", f_index_html_size, "text/html", f_index_html_contents},' in text
    assert '{"/assets/app-1.js", ' in text
    assert "f_assets_app_1_js_contents" in text
    assert text.index("/index.html") < text.index("/assets/app-1.js")


def test_render_empty_list():
    text = render_header([])
    assert "const file files[] PROGMEM = {\n  };" in text


def test_render_custom_template(tmp_path, assets):
    template = tmp_path / "routes.j2"
    template.write_text("{% for f in files %}{{ f.route_path }} {{ f.compressed_size }}\n{% endfor %}")
    text = render_header(assets, template)
    assert text.splitlines() == [
        f"/index.html {assets[0].compressed_size}",
        f"/assets/app-1.js {assets[1].compressed_size}",
    ]


def test_render_errors_are_wrapped(tmp_path, assets):
    broken = tmp_path / "broken.j2"
    broken.write_text("{% for f in files %}{{ f.route_path }")
    with pytest.raises(RenderError):
        render_header(assets, broken)

    undefined = tmp_path / "undefined.j2"
    undefined.write_text("{{ not_there }}")
    with pytest.raises(RenderError):
        render_header(assets, undefined)

    with pytest.raises(RenderError):
        render_header(assets, tmp_path / "missing.j2")


def test_c_string_escapes():
    assert c_string('/a"b\\c') == '/a\\"b\\\\c'


def test_write_header_creates_directory(tmp_path):
    path = write_header(tmp_path / "dist", "// header\n")
    assert path == output_path_for(tmp_path / "dist")
    assert path == tmp_path / "dist" / "_esp32" / "static_files.h"
    assert path.read_text() == "// header\n"
    assert [p.name for p in path.parent.iterdir()] == ["static_files.h"]


def test_write_header_replaces_existing(tmp_path):
    write_header(tmp_path, "old")
    path = write_header(tmp_path, "new")
    assert path.read_text() == "new"


def test_render_uses_positional_initializers(assets):
    text = render_header(assets)
    assert ".path =" not in text
    assert ".contents =" not in text


@pytest.mark.skipif(os.name != "posix", reason="POSIX file modes")
def test_write_header_follows_umask(tmp_path):
    previous = os.umask(0o022)
    try:
        path = write_header(tmp_path, "// header\n")
    finally:
        os.umask(previous)
    assert stat.S_IMODE(path.stat().st_mode) == 0o644


def test_write_header_blocked_by_file(tmp_path):
    (tmp_path / "_esp32").write_text("not a directory")
    with pytest.raises(OSError):
        write_header(tmp_path, "// header\n")
