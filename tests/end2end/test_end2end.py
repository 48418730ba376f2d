from pathlib import Path

import pytest

from vibex import cli


def _write(root: Path, rel: str, content: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_end_to_end_combine_with_every_transform(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _write(tmp_path, "app.js", "/* header */\nconst mail = 'a@b.com'; // contact\n")
    _write(tmp_path, "styles.css", "body { color: red; } /* theme */\n")
    _write(tmp_path, "node_modules/dep/index.js", "module.exports = 1;\n")
    _write(tmp_path, "vx_old.txt", "<start of stale>")
    (tmp_path / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00")
    monkeypatch.chdir(tmp_path)

    exit_code = cli.main(["c", "--rc", "--rp", "-s"])

    assert exit_code == 0
    outputs = sorted(p.name for p in tmp_path.glob("vx_*.txt"))
    assert outputs == sorted(["vx_old.txt", f"vx_{tmp_path.name}.txt"])
    text = (tmp_path / f"vx_{tmp_path.name}.txt").read_text(encoding="utf-8")
    assert text == (
        "<start of app.js> const mail = 'EMAIL@E'; <end of app.js> "
        "<start of styles.css> body { color: red; } <end of styles.css>"
    )


def test_end_to_end_trim_and_cut(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write(tmp_path, "data.txt", "0123456789ABCDEF")
    monkeypatch.chdir(tmp_path)

    assert cli.main(["c", "-f", "data.txt", "--trim", "0-4", "10-14", "--cut", "0-1"]) == 0

    text = (tmp_path / "vx_data.txt").read_text(encoding="utf-8")
    assert text == "<start of data.txt> 234ABCDE <end of data.txt>"


def test_end_to_end_remove_comments_in_place(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    script = _write(tmp_path, "tools/run.sh", "echo start # go\n")
    page = _write(tmp_path, "index.html", "<p>hi</p><!-- todo -->\n")
    plain = _write(tmp_path, "notes.md", "# Title\n")
    monkeypatch.chdir(tmp_path)

    assert cli.main(["rcm"]) == 0

    assert script.read_text(encoding="utf-8") == "echo start \n"
    assert page.read_text(encoding="utf-8") == "<p>hi</p>\n"
    assert plain.read_text(encoding="utf-8") == "# Title\n"
    out = capsys.readouterr().out
    assert "Files modified: 2" in out
    assert "Files unchanged/no comments: 1" in out


def test_end_to_end_detect_reports_findings(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write(tmp_path, "contacts.py", "OWNER = 'a@b.com'\nPHONE = '555-123-4567'\n")
    _write(tmp_path, "clean.py", "x = 1\n")
    monkeypatch.chdir(tmp_path)

    assert cli.main(["detect"]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out == ["contacts.py: phone=1 email=1"]
