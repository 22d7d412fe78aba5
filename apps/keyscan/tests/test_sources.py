from __future__ import annotations

from apps.keyscan.sources import iter_paths_from_args, iter_source_files, read_units


EXTS = {".tsx", ".ts"}


def _touch(path, text="t(\"a.b\");\n"):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_iter_source_files_filters_and_sorts(tmp_path):
    src = tmp_path / "src"
    _touch(src / "b.tsx")
    _touch(src / "a" / "c.ts")
    _touch(src / "styles.css")
    _touch(src / "node_modules" / "lib" / "index.ts")
    _touch(src / "dist" / "bundle.ts")

    found = [p.relative_to(src).as_posix() for p in iter_source_files(src, EXTS)]
    assert found == ["a/c.ts", "b.tsx"]


def test_missing_source_dir_yields_nothing(tmp_path):
    assert list(iter_source_files(tmp_path / "missing", EXTS)) == []


def test_paths_from_args_mix_files_and_dirs(tmp_path):
    _touch(tmp_path / "one.tsx")
    _touch(tmp_path / "pages" / "two.tsx")
    _touch(tmp_path / "notes.md")

    found = list(iter_paths_from_args(["one.tsx", "pages", "notes.md", "absent.tsx"], tmp_path, EXTS))
    assert [p.name for p in found] == ["one.tsx", "two.tsx"]


def test_read_units_uses_root_relative_paths(tmp_path):
    path = _touch(tmp_path / "src" / "App.tsx", "<p>{t(\"x.y\")}</p>")
    [unit] = read_units([path], tmp_path)
    assert unit.path == "src/App.tsx"
    assert unit.text == "<p>{t(\"x.y\")}</p>"


def test_read_units_replaces_undecodable_bytes(tmp_path):
    path = tmp_path / "bad.ts"
    path.write_bytes(b"t(\"a.b\"); // \xff\n")
    [unit] = read_units([path], tmp_path)
    assert unit.text.startswith("t(\"a.b\");")
    assert "�" in unit.text
