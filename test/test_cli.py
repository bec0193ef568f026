from espstatic.cli import collect_artifacts, main


def test_build_command(dist):
    assert main(["build", str(dist), "--no-public"]) == 0
    header = dist / "_esp32" / "static_files.h"
    text = header.read_text()
    assert '{"/index.html", ' in text
    assert '{"/assets/app.js", ' in text
    assert "f_assets_app_js_contents" in text


def test_rebuild_ignores_generated_header(dist):
    assert main(["build", str(dist), "--no-public"]) == 0
    first = (dist / "_esp32" / "static_files.h").read_bytes()
    assert main(["build", str(dist), "--no-public"]) == 0
    assert (dist / "_esp32" / "static_files.h").read_bytes() == first
    assert b"_esp32" not in first


def test_collect_artifacts_sorted_relative(dist):
    (dist / "_esp32").mkdir()
    (dist / "_esp32" / "static_files.h").write_text("old")
    assert [a.filename for a in collect_artifacts(dist)] == ["assets/app.js", "index.html"]


def test_public_dir_next_to_dist_is_picked_up(dist, public_dir):
    assert public_dir.parent == dist.parent
    assert main(["build", str(dist)]) == 0
    assert '{"/favicon.ico", ' in (dist / "_esp32" / "static_files.h").read_text()


def test_explicit_public_dir(dist, tmp_path):
    static = tmp_path / "static"
    static.mkdir()
    (static / "robots.txt").write_text("User-agent: *\n")
    assert main(["build", str(dist), "--public-dir", str(static)]) == 0
    assert '{"/robots.txt", ' in (dist / "_esp32" / "static_files.h").read_text()


def test_strict_build_fails_on_unknown_type(dist):
    (dist / "blob.unknownext").write_bytes(b"\x00")
    assert main(["build", str(dist), "--no-public"]) == 0
    assert main(["build", str(dist), "--no-public", "--strict"]) == 1


def test_missing_out_dir(tmp_path, capsys):
    assert main(["build", str(tmp_path / "nope")]) == 1
    assert "not found" in capsys.readouterr().out


def test_invalid_env_config(dist, monkeypatch):
    monkeypatch.setenv("ESPSTATIC_JOBS", "zero")
    assert main(["build", str(dist), "--no-public"]) == 1
