from pathlib import Path
import shutil
import tempfile

import pytest

from static_builder.config import BuildConfig, HtmlOptions, StyleOptions
from static_builder.errors import FileSystemError, NotFoundError, ParseError
from static_builder.pipeline.build import build
from static_builder.stages.styles import compile_style_file

REPO = Path(__file__).resolve().parents[2]
EXAMPLE_SITE = REPO / "examples" / "example_site" / "src"

def fake_script(path: Path, **kwargs) -> str:
    return f"console.log({path.name!r});\n"

def counting(fn, calls):
    def wrapped(path, **kwargs):
        calls.append(Path(path).name)
        return fn(path, **kwargs)
    return wrapped

def test_build_example_site() -> None:
    with tempfile.TemporaryDirectory() as td:
        out = Path(td) / "dist"
        cfg = BuildConfig(source=EXAMPLE_SITE, destination=out, css=StyleOptions(package_root=Path(td)))
        style_calls, script_calls = [], []

        stats = build(
            cfg,
            compile_style=counting(compile_style_file, style_calls),
            compile_script=counting(fake_script, script_calls),
        )

        assert stats.documents == 2
        assert style_calls == ["style.scss"]
        assert script_calls == ["app.ts"]
        assert stats.cache_hits == 2

        index = (out / "index.html").read_text(encoding="utf-8")
        assert 'href="style.css"' in index
        assert 'src="app.js"' in index
        assert 'rel="preload"' in index
        assert "<noscript>" in index
        assert "style.scss" not in index
        assert "app.ts" not in index
        assert 'class="page home"' in index
        assert "https://fonts.example.com/inter.css" in index

        about = (out / "about" / "index.html").read_text(encoding="utf-8")
        assert 'href="../style.css"' in about
        assert 'src="../app.js"' in about

        css = (out / "style.css").read_text(encoding="utf-8")
        assert "body{color:#333}" in css
        assert "p{margin:0}" in css
        assert (out / "app.js").read_text(encoding="utf-8") == "console.log('app.ts');\n"

        for name in ("robots.txt", "images/logo.svg"):
            assert (out / name).read_bytes() == (EXAMPLE_SITE / name).read_bytes()
        assert not (out / "style.scss").exists()
        assert not (out / "partials" / "_colors.scss").exists()
        assert not (out / "lib" / "greet.ts").exists()
        assert stats.copied == 2

def test_built_outputs_are_not_overwritten_by_sources(tmp_path: Path) -> None:
    src = tmp_path / "src"
    src.mkdir()
    (src / "index.html").write_text('<script src="vendor.js"></script>', encoding="utf-8")
    (src / "vendor.js").write_text("export { v };\nvar v = 1;\n", encoding="utf-8")
    (src / "notes.js").write_text("raw();\n", encoding="utf-8")

    cfg = BuildConfig(source=src, destination=tmp_path / "dist", html=HtmlOptions(minify=False))
    build(cfg, compile_script=lambda path, **kw: "bundled();\n")

    assert (tmp_path / "dist" / "vendor.js").read_text(encoding="utf-8") == "bundled();\n"
    assert (tmp_path / "dist" / "notes.js").read_text(encoding="utf-8") == "raw();\n"

def test_clean_removes_stale_files(tmp_path: Path) -> None:
    src = tmp_path / "src"
    src.mkdir()
    (src / "index.html").write_text("<p>hi</p>", encoding="utf-8")
    dist = tmp_path / "dist"
    (dist / "old").mkdir(parents=True)
    (dist / "old" / "stale.css").write_text("x", encoding="utf-8")

    build(BuildConfig(source=src, destination=dist, clean=True))

    assert not (dist / "old" / "stale.css").exists()
    assert (dist / "index.html").exists()

def test_abort_keeps_completed_documents(tmp_path: Path) -> None:
    src = tmp_path / "src"
    src.mkdir()
    (src / "a.html").write_text('<link rel="stylesheet" href="a.scss">', encoding="utf-8")
    (src / "a.scss").write_text(".a { color: red; }\n", encoding="utf-8")
    (src / "b.html").write_text('<link rel="stylesheet" href="missing.scss">', encoding="utf-8")
    (src / "c.html").write_text('<link rel="stylesheet" href="c.scss">', encoding="utf-8")
    (src / "c.scss").write_text(".c { color: blue; }\n", encoding="utf-8")
    (src / "robots.txt").write_text("ok", encoding="utf-8")
    dist = tmp_path / "dist"

    calls = []
    cfg = BuildConfig(source=src, destination=dist, css=StyleOptions(package_root=tmp_path))
    with pytest.raises(NotFoundError) as ei:
        build(cfg, compile_style=counting(compile_style_file, calls), compile_script=fake_script)

    assert ei.value.path == str(src / "missing.scss")
    assert calls == ["a.scss", "missing.scss"]
    assert (dist / "a.html").exists()
    assert (dist / "a.css").read_text(encoding="utf-8").startswith(".a{color:red}")
    assert not (dist / "b.html").exists()
    assert not (dist / "c.html").exists()
    assert not (dist / "c.css").exists()
    assert not (dist / "robots.txt").exists()

def test_rebuild_is_deterministic() -> None:
    with tempfile.TemporaryDirectory() as td:
        site = Path(td) / "src"
        shutil.copytree(EXAMPLE_SITE, site)
        cfg = BuildConfig(source=site, destination=Path(td) / "dist", css=StyleOptions(package_root=Path(td)))
        build(cfg, compile_script=fake_script)
        first = (Path(td) / "dist" / "index.html").read_text(encoding="utf-8")
        build(cfg, compile_script=fake_script)
        assert (Path(td) / "dist" / "index.html").read_text(encoding="utf-8") == first

def test_non_canonical_references_are_rewritten(tmp_path: Path) -> None:
    src = tmp_path / "src"
    (src / "a").mkdir(parents=True)
    (src / "a" / "index.html").write_text(
        '<link rel="stylesheet" href="../a/x.scss"><script src="./../a/app.ts"></script>',
        encoding="utf-8",
    )
    (src / "a" / "x.scss").write_text(".x { color: red; }\n", encoding="utf-8")
    (src / "a" / "app.ts").write_text("", encoding="utf-8")

    cfg = BuildConfig(
        source=src,
        destination=tmp_path / "dist",
        css=StyleOptions(package_root=tmp_path),
        html=HtmlOptions(minify=False, reduce_blocking=False),
    )
    build(cfg, compile_script=fake_script)

    html = (tmp_path / "dist" / "a" / "index.html").read_text(encoding="utf-8")
    assert 'href="x.css"' in html
    assert 'src="app.js"' in html
    assert ".scss" not in html
    assert ".ts" not in html
    assert (tmp_path / "dist" / "a" / "x.css").exists()

def test_missing_source_directory(tmp_path: Path) -> None:
    cfg = BuildConfig(source=tmp_path / "nope", destination=tmp_path / "dist")
    with pytest.raises(NotFoundError) as ei:
        build(cfg)
    assert ei.value.path == str(tmp_path / "nope")

def test_unwritable_destination_is_reported(tmp_path: Path) -> None:
    src = tmp_path / "src"
    src.mkdir()
    (src / "index.html").write_text("<p>hi</p>", encoding="utf-8")
    dist = tmp_path / "dist"
    dist.write_text("not a directory", encoding="utf-8")

    with pytest.raises(FileSystemError) as ei:
        build(BuildConfig(source=src, destination=dist))
    assert ei.value.path is not None

def test_non_utf8_document_is_a_parse_error(tmp_path: Path) -> None:
    src = tmp_path / "src"
    src.mkdir()
    (src / "index.html").write_bytes(b"<p>\xff\xfe</p>")

    with pytest.raises(ParseError) as ei:
        build(BuildConfig(source=src, destination=tmp_path / "dist"))
    assert ei.value.path == str(src / "index.html")

def test_uppercase_html_is_built(tmp_path: Path) -> None:
    src = tmp_path / "src"
    src.mkdir()
    (src / "PAGE.HTML").write_text('<link rel="stylesheet" href="S.SCSS">', encoding="utf-8")
    (src / "S.SCSS").write_text(".s { color: red; }\n", encoding="utf-8")

    cfg = BuildConfig(source=src, destination=tmp_path / "dist", css=StyleOptions(package_root=tmp_path))
    stats = build(cfg)

    assert stats.documents == 1
    assert 'href="S.css"' in (tmp_path / "dist" / "PAGE.HTML").read_text(encoding="utf-8")
    assert (tmp_path / "dist" / "S.css").exists()

def test_destination_inside_source_is_skipped(tmp_path: Path) -> None:
    (tmp_path / "index.html").write_text("<p>hi</p>", encoding="utf-8")
    (tmp_path / "robots.txt").write_text("ok", encoding="utf-8")
    cfg = BuildConfig(source=tmp_path, destination=tmp_path / "dist")

    build(cfg)
    stats = build(cfg)

    assert stats.documents == 1
    assert stats.copied == 1
    assert not (tmp_path / "dist" / "dist").exists()
