"""Main CLI entry point for the mmbr-html command-line tool.

Provides commands to parse HTML files into a document tree and to dump the
token sequence the tokenizer produces.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from mmbr_html import __version__
from mmbr_html.api import HTMLParser, format_tree, parse_file
from mmbr_html.shared.config import EndTagMatching, ParserConfig
from mmbr_html.shared.exceptions import ConfigError, ConfigValidationError
from mmbr_html.shared.logging import get_logger

logger = get_logger(__name__, component="cli")


def load_config(args: argparse.Namespace) -> ParserConfig:
    """Build the parser configuration from ``--config`` and flags."""
    config = ParserConfig()
    config_path = getattr(args, "config", None)
    if config_path is not None:
        try:
            text = Path(config_path).read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ConfigValidationError(
                f"Configuration file {config_path} is not valid UTF-8: {e}",
                field_name="config",
            ) from e
        config = ParserConfig.from_json(text)

    if getattr(args, "strict_end_tags", False):
        config = config.override(tree__end_tag_matching=EndTagMatching.MATCH_NAME)
    return config


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the argument parser for all subcommands."""
    parser = argparse.ArgumentParser(
        prog="mmbr-html",
        description="Tokenize and parse a small subset of HTML into a document tree",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--config", type=Path, help="JSON file with a parser configuration"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Only log errors"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parse_parser = subparsers.add_parser("parse", help="Parse HTML into a tree")
    parse_parser.add_argument("paths", nargs="*", type=Path, help="HTML files to parse")
    parse_parser.add_argument(
        "-e", "--html", help="Parse this HTML text instead of files"
    )
    parse_parser.add_argument(
        "--format",
        choices=["tree", "json", "summary"],
        default="tree",
        help="Output format (default: tree)",
    )
    parse_parser.add_argument(
        "--encoding", default="utf-8", help="Encoding of the input files"
    )
    parse_parser.add_argument(
        "--strict-end-tags",
        action="store_true",
        help="Only close elements whose name matches the end tag",
    )

    tokens_parser = subparsers.add_parser("tokens", help="Dump the token sequence")
    tokens_parser.add_argument("path", nargs="?", type=Path, help="HTML file")
    tokens_parser.add_argument(
        "-e", "--html", help="Tokenize this HTML text instead of a file"
    )
    tokens_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    tokens_parser.add_argument(
        "--encoding", default="utf-8", help="Encoding of the input file"
    )

    return parser


def _result_to_dict(source: str, result: Any) -> Dict[str, Any]:
    return {
        "source": source,
        "success": result.success,
        "summary": result.summary(),
        "diagnostics": [diag.to_dict() for diag in result.diagnostics],
        "document": result.document.to_dict(),
    }


def cmd_parse(args: argparse.Namespace) -> int:
    """Parse files or inline HTML and print the resulting trees."""
    config = load_config(args)
    parser = HTMLParser(config)

    if args.html is not None:
        results = [("<string>", parser.parse(args.html))]
    elif args.paths:
        results = [
            (str(path), parse_file(path, encoding=args.encoding, config=config))
            for path in args.paths
        ]
    else:
        print("parse: provide file paths or --html", file=sys.stderr)
        return 1

    if args.format == "json":
        print(json.dumps([_result_to_dict(src, res) for src, res in results], indent=2))
    else:
        for source, result in results:
            if len(results) > 1:
                print(f"== {source}")
            if args.format == "summary":
                print(json.dumps(result.summary(), indent=2))
            else:
                print(format_tree(result.document))
            for diag in result.diagnostics:
                print(f"{diag.severity.name}: {diag.message}", file=sys.stderr)

    return 0 if all(result.success for _, result in results) else 1


def cmd_tokens(args: argparse.Namespace) -> int:
    """Print the token sequence for a file or inline HTML."""
    if args.html is not None:
        html = args.html
    elif args.path is not None:
        try:
            html = args.path.read_text(encoding=args.encoding)
        except (OSError, UnicodeDecodeError) as e:
            print(f"tokens: cannot read {args.path}: {e}", file=sys.stderr)
            return 1
    else:
        print("tokens: provide a file path or --html", file=sys.stderr)
        return 1

    parser = HTMLParser(load_config(args))
    tokens = list(parser.tokenize(html))

    if args.format == "json":
        payload: List[Dict[str, Any]] = [
            {
                "type": token.type.name,
                "value": token.value,
                "position": token.position.to_dict() if token.position else None,
            }
            for token in tokens
        ]
        print(json.dumps(payload, indent=2))
    else:
        for token in tokens:
            print(token)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        if args.command == "parse":
            return cmd_parse(args)
        if args.command == "tokens":
            return cmd_tokens(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1
    except (ConfigError, OSError) as e:
        logger.error("Cannot load configuration", extra={"error": str(e)}, exc_info=False)
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
