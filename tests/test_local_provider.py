from pathlib import Path

import pytest

from review_scanner.errors import ProviderError
from review_scanner.providers.local import LocalDiffProvider


def test_explicit_paths_are_read_from_root(tmp_path: Path):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "A.java").write_text("class A {}\n", encoding="utf-8")
    (tmp_path / "big.js").write_text("x" * 64, encoding="utf-8")

    provider = LocalDiffProvider(
        tmp_path,
        paths=["src/A.java", "big.js", "gone.java", str(tmp_path / "src" / "A.java")],
        max_file_size_bytes=32,
    )
    files = provider.list_changed_files()

    assert [item.path for item in files] == ["src/A.java", "big.js", "gone.java"]
    assert files[0].text == "class A {}\n"
    assert files[1].text is None
    assert "exceeds 32 bytes" in files[1].skip_reason
    assert files[2].skip_reason == "file not found"


def test_git_diff_against_base(monkeypatch, tmp_path: Path):
    (tmp_path / "App.jsx").write_text("const a = 1;\n", encoding="utf-8")
    calls: list[list[str]] = []

    def fake_run_git(cmd):
        calls.append(cmd)
        return ["App.jsx"]

    monkeypatch.setattr("review_scanner.providers.local._run_git", fake_run_git)

    files = LocalDiffProvider(tmp_path, base_ref="origin/main").list_changed_files()

    assert [item.path for item in files] == ["App.jsx"]
    assert calls[0][-1] == "origin/main...HEAD"
    assert "--diff-filter=ACMR" in calls[0]


def test_working_tree_changes_include_untracked(monkeypatch, tmp_path: Path):
    (tmp_path / "A.java").write_text("class A {}\n", encoding="utf-8")
    (tmp_path / "New.java").write_text("class New {}\n", encoding="utf-8")
    outputs = iter([["A.java"], ["New.java"]])

    monkeypatch.setattr("review_scanner.providers.local._run_git", lambda cmd: next(outputs))

    files = LocalDiffProvider(tmp_path).list_changed_files()

    assert [item.path for item in files] == ["A.java", "New.java"]


def test_missing_root_raises(tmp_path: Path):
    with pytest.raises(ProviderError):
        LocalDiffProvider(tmp_path / "nope", paths=["A.java"]).list_changed_files()
