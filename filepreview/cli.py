from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

import filepreview
from filepreview.extractors.data_types import PreviewResult
from filepreview.extractors.serialization import serialize_preview
from filepreview.settings import PreviewSettings


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filepreview",
        description="Preview a file and emit its content to stdout (or JSON with --json).",
    )
    parser.add_argument(
        "location",
        help="Path or URL of the file to preview.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the structured preview as JSON (omits binary payloads by default).",
    )
    parser.add_argument(
        "--binary",
        action="store_true",
        help="With --json, include image payloads as base64 text.",
    )
    parser.add_argument(
        "--info",
        action="store_true",
        help="Only print what is known about the file from its name, as JSON.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output to stderr.",
    )
    return parser


def _render_content(result: PreviewResult) -> str:
    content = getattr(result, "content", None)
    if isinstance(content, str) and content:
        return content
    return result.get_full_text()


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
            f"filepreview: warning: unsupported arguments: {unknown_str}",
            file=sys.stderr,
        )
        return 1

    settings = PreviewSettings.from_env()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.resolved_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        if args.binary and not args.json:
            raise ValueError("--binary requires --json")
        if args.info:
            info = filepreview.get_file_info(args.location)
            json.dump(serialize_preview(info), sys.stdout)
            sys.stdout.write("\n")
            return 0
        result = filepreview.preview_file(args.location, settings=settings)
        if args.json:
            payload = serialize_preview(result, include_binary=bool(args.binary))
            json.dump(payload, sys.stdout, ensure_ascii=False)
        else:
            sys.stdout.write(_render_content(result).rstrip())
        sys.stdout.write("\n")
        return 0
    except Exception as exc:
        print(f"filepreview: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
