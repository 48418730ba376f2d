from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from vibex import binary_detection
from vibex.binary_detection import BinaryDetector, extension_is_binary, sniff_binary


@pytest.mark.unit
def test_sniff_binary_text_and_empty_files(tmp_path: Path) -> None:
    text = tmp_path / "a.txt"
    text.write_text("hello\nworld\n", encoding="utf-8")
    empty = tmp_path / "empty.py"
    empty.write_bytes(b"")

    assert not sniff_binary(text)
    assert not sniff_binary(empty)


@pytest.mark.unit
def test_sniff_binary_nul_byte(tmp_path: Path) -> None:
    path = tmp_path / "blob.txt"
    path.write_bytes(b"abc\x00def")

    assert sniff_binary(path)


@pytest.mark.unit
def test_sniff_binary_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "latin.js"
    path.write_bytes(b"\xff\xfe\xfa not utf-8")

    assert sniff_binary(path)


@pytest.mark.unit
def test_sniff_binary_tolerates_a_character_cut_by_the_chunk(tmp_path: Path) -> None:
    path = tmp_path / "accents.md"
    path.write_text("a" + "é" * 5000, encoding="utf-8")

    assert not sniff_binary(path, nbytes=8192)


@pytest.mark.unit
def test_sniff_binary_raises_on_missing_file(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        sniff_binary(tmp_path / "missing.txt")


@pytest.mark.unit
def test_extension_is_binary() -> None:
    assert extension_is_binary(Path("logo.PNG"))
    assert not extension_is_binary(Path("app.js"))


@pytest.mark.unit
def test_unreadable_file_is_classified_by_extension_without_degrading(
    tmp_path: Path,
    mocker: MockerFixture,
) -> None:
    logger = mocker.patch.object(binary_detection, "logger")
    detector = BinaryDetector()

    assert detector.is_binary(tmp_path / "missing.png")
    assert not detector.is_binary(tmp_path / "missing.txt")
    assert not detector.degraded
    assert logger.warning.call_count == 2


@pytest.mark.unit
def test_broken_checker_degrades_once(tmp_path: Path, mocker: MockerFixture) -> None:
    logger = mocker.patch.object(binary_detection, "logger")

    def broken(_: Path) -> bool:
        raise RuntimeError("no magic database")

    detector = BinaryDetector(primary=broken)

    assert detector.is_binary(tmp_path / "photo.jpg")
    assert not detector.is_binary(tmp_path / "notes.md")
    assert detector.degraded
    logger.warning.assert_called_once()


@pytest.mark.unit
def test_detector_without_primary_is_degraded_from_the_start(
    tmp_path: Path,
    mocker: MockerFixture,
) -> None:
    logger = mocker.patch.object(binary_detection, "logger")
    path = tmp_path / "data.txt"
    path.write_bytes(b"\x00\x01")

    detector = BinaryDetector(primary=None)

    assert detector.degraded
    assert not detector.is_binary(path)
    logger.warning.assert_called_once()


@pytest.mark.unit
def test_detector_never_raises(tmp_path: Path, mocker: MockerFixture) -> None:
    mocker.patch.object(binary_detection, "logger")

    def broken(_: Path) -> bool:
        raise RuntimeError("boom")

    detector = BinaryDetector(primary=broken, fallback=broken)

    assert detector.is_binary(tmp_path / "x.bin") is False
