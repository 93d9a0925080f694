import io
import zipfile

from ooxml2text.cli import main
from ooxml2text.extractors.docx_extractor import read_docx


def _write_docx(path, *paragraphs: str) -> None:
    body = "".join(f"<w:p><w:r><w:t>{p}</w:t></w:r></w:p>" for p in paragraphs)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("word/document.xml", f"<w:document><w:body>{body}</w:body></w:document>")


def test_cli_extract_prints_text(tmp_path, capsys) -> None:
    path = tmp_path / "memo.docx"
    _write_docx(path, "first", "second")

    exit_code = main(["extract", str(path)])
    captured = capsys.readouterr()

    assert exit_code == 0
    assert captured.out == "first\nsecond\n"


def test_cli_extract_with_content_type(tmp_path, capsys) -> None:
    path = tmp_path / "memo.bin"
    _write_docx(path, "typed")

    exit_code = main(
        [
            "extract",
            str(path),
            "--content-type",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        ]
    )
    captured = capsys.readouterr()

    assert exit_code == 0
    assert captured.out == "typed\n"


def test_cli_extract_unsupported_file(tmp_path, capsys) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("plain", encoding="utf-8")

    exit_code = main(["extract", str(path)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert captured.out == ""
    assert captured.err.startswith("ooxml2text: ")


def test_cli_extract_corrupt_package(tmp_path, capsys) -> None:
    path = tmp_path / "broken.docx"
    path.write_bytes(b"not a zip at all")

    exit_code = main(["extract", str(path)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "ZIP" in captured.err


def test_cli_write_creates_docx(tmp_path, capsys) -> None:
    source = tmp_path / "draft.txt"
    source.write_text("line one\nline two", encoding="utf-8")

    exit_code = main(["write", str(source)])
    captured = capsys.readouterr()

    output = tmp_path / "draft.docx"
    assert exit_code == 0
    assert output.exists()
    assert "Wrote" in captured.err
    assert read_docx(io.BytesIO(output.read_bytes())) == "line one\nline two"


def test_cli_write_to_explicit_output(tmp_path) -> None:
    source = tmp_path / "draft.txt"
    source.write_text("hello", encoding="utf-8")
    output = tmp_path / "out" / "result.docx"
    output.parent.mkdir()

    exit_code = main(["write", str(source), "-o", str(output)])

    assert exit_code == 0
    assert read_docx(io.BytesIO(output.read_bytes())) == "hello"


def test_cli_write_refuses_to_overwrite_input(tmp_path, capsys) -> None:
    source = tmp_path / "draft.docx"
    source.write_text("text", encoding="utf-8")

    exit_code = main(["write", str(source)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert source.read_text(encoding="utf-8") == "text"
    assert "overwrite" in captured.err


def test_cli_rejects_unknown_arguments(tmp_path, capsys) -> None:
    path = tmp_path / "memo.docx"
    _write_docx(path, "x")

    exit_code = main(["extract", str(path), "--bogus"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "unsupported arguments: --bogus" in captured.err


def test_cli_requires_a_command(capsys) -> None:
    exit_code = main([])

    assert exit_code == 2


def test_cli_extract_collapses_trailing_blank_lines(tmp_path, capsys) -> None:
    path = tmp_path / "memo.docx"
    _write_docx(path, "body", "", "")

    exit_code = main(["extract", str(path)])
    captured = capsys.readouterr()

    assert exit_code == 0
    assert captured.out == "body\n"


def test_cli_extract_help_mentions_trailing_whitespace(capsys) -> None:
    exit_code = main(["extract", "--help"])
    captured = capsys.readouterr()

    assert exit_code == 0
    assert "Trailing" in captured.out
