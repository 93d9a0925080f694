from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

import ooxml2text
from ooxml2text.mime_types import DocumentKind, suggested_extension


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ooxml2text",
        description="Extract plain text from .docx/.xlsx/.pptx files, or write plain text as .docx.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_help = (
        "Print the text of an Office Open XML file to stdout. Trailing "
        "whitespace, including trailing blank lines, is replaced by a "
        "single newline."
    )
    extract = subparsers.add_parser(
        "extract",
        help=extract_help,
        description=extract_help,
    )
    extract.add_argument(
        "path",
        type=Path,
        help="Path to the file to extract.",
    )
    extract.add_argument(
        "--content-type",
        default=None,
        help="OOXML content type of the file (guessed from the extension by default).",
    )

    write = subparsers.add_parser(
        "write",
        help="Write a UTF-8 text file as a minimal .docx document.",
    )
    write.add_argument(
        "path",
        type=Path,
        help="Path to the UTF-8 text file.",
    )
    write.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Destination .docx path (defaults to the input path with a .docx suffix).",
    )
    return parser


def _extract(args: argparse.Namespace) -> int:
    text = ooxml2text.read_file(args.path, content_type=args.content_type)
    sys.stdout.write(text.rstrip())
    sys.stdout.write("\n")
    return 0


def _write(args: argparse.Namespace) -> int:
    output = args.output
    if output is None:
        output = args.path.with_suffix(suggested_extension(DocumentKind.WORD_DOCUMENT))
    if output.resolve() == args.path.resolve():
        raise ValueError(f"Refusing to overwrite the input file {args.path}")
    text = args.path.read_text(encoding="utf-8")
    ooxml2text.save_docx(text, output)
    print(f"Wrote {output}", file=sys.stderr)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    try:
        args, unknown = parser.parse_known_args(argv)
    except SystemExit as exc:
        code = exc.code if isinstance(exc.code, int) else 1
        return code

    if unknown:
        unknown_str = " ".join(unknown)
        print(
            f"ooxml2text: warning: unsupported arguments: {unknown_str}",
            file=sys.stderr,
        )
        return 1

    try:
        if args.command == "extract":
            return _extract(args)
        return _write(args)
    except Exception as exc:
        print(f"ooxml2text: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
