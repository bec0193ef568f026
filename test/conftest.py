import pytest

from espstatic import BuildArtifact

INDEX_HTML = "<!doctype html><html><head><script src=\"/app.js\"></script></head><body></body></html>"
APP_JS = "document.body.textContent = 'hello from the ESP32';\n" * 20
FAVICON = bytes(range(256)) * 2


@pytest.fixture
def artifacts():
    return [
        BuildArtifact("index.html", INDEX_HTML),
        BuildArtifact("app.js", APP_JS),
    ]


@pytest.fixture
def public_dir(tmp_path):
    public = tmp_path / "public"
    public.mkdir()
    (public / "favicon.ico").write_bytes(FAVICON)
    return public


@pytest.fixture
def dist(tmp_path):
    out = tmp_path / "dist"
    (out / "assets").mkdir(parents=True)
    (out / "index.html").write_text(INDEX_HTML)
    (out / "assets" / "app.js").write_text(APP_JS)
    return out
