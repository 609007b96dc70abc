"""Public parsing API.

This module provides the core boundary, ``tokenize`` and ``construct_tree``,
plus convenience functions and a reusable parser class that run both stages
and return a ``ParseResult``.
"""

import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from mmbr_html.shared import (
    DiagnosticSeverity,
    ParserConfig,
    get_logger,
)
from mmbr_html.tokenization import HTMLTokenizer, tokenize
from mmbr_html.tree import HTMLTreeBuilder, ParseResult, construct_tree

# Max length for content preview in logs
PREVIEW_LENGTH = 100
MS_PER_SECOND = 1000

__all__ = [
    "HTMLParser",
    "construct_tree",
    "parse_file",
    "parse_string",
    "tokenize",
]


def parse_string(
    html: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse an HTML string into a document tree.

    Args:
        html: Complete, already decoded HTML text
        config: Parser configuration (defaults to ``ParserConfig()``)
        correlation_id: Optional correlation ID for parse tracking

    Returns:
        ParseResult containing the document tree and diagnostics

    Examples:
        >>> result = parse_string('<html>hello</html>')
        >>> result.document.first_child.tag_name
        'html'
        >>> result.document.text_content
        'hello'
    """
    config = config or ParserConfig()
    correlation_id = correlation_id or config.correlation_id
    logger = get_logger(__name__, correlation_id, "parse_string")

    logger.debug(
        "Starting string parse operation",
        extra={
            "content_length": len(html),
            "preview": (
                html[:PREVIEW_LENGTH] + "..."
                if len(html) > PREVIEW_LENGTH else html
            )
        }
    )

    tokenizer = HTMLTokenizer(html, config=config.tokenizer, correlation_id=correlation_id)
    builder = HTMLTreeBuilder(config=config.tree, correlation_id=correlation_id)
    return builder.build(tokenizer)


def parse_file(
    file_path: Union[str, Path],
    encoding: str = "utf-8",
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Read a file and parse its contents.

    Read failures do not raise: they produce an unsuccessful result with a
    CRITICAL diagnostic.

    Args:
        file_path: Path to the HTML file
        encoding: Text encoding of the file
        config: Parser configuration
        correlation_id: Optional correlation ID for parse tracking

    Returns:
        ParseResult containing the document tree and diagnostics
    """
    start_time = time.time()
    config = config or ParserConfig()
    correlation_id = correlation_id or config.correlation_id
    logger = get_logger(__name__, correlation_id, "parse_file")
    path_obj = Path(file_path)

    logger.info(
        "Starting file parse operation",
        extra={"file_path": str(path_obj), "encoding": encoding}
    )

    if not path_obj.exists():
        return _create_error_result(
            f"File not found: {path_obj}", correlation_id, start_time
        )
    if not path_obj.is_file():
        return _create_error_result(
            f"Path is not a file: {path_obj}", correlation_id, start_time
        )

    try:
        content = path_obj.read_text(encoding=encoding)
    except PermissionError:
        return _create_error_result(
            f"Permission denied accessing file: {path_obj}", correlation_id, start_time
        )
    except (LookupError, UnicodeDecodeError) as e:
        logger.warning(
            "File could not be decoded",
            extra={"file_path": str(path_obj), "error": str(e)}
        )
        return _create_error_result(
            f"Cannot decode {path_obj} as {encoding}: {e}", correlation_id, start_time
        )
    except OSError as e:
        return _create_error_result(
            f"Cannot read file {path_obj}: {e}", correlation_id, start_time
        )

    result = parse_string(content, config=config, correlation_id=correlation_id)
    result.add_diagnostic(
        DiagnosticSeverity.INFO,
        f"File parsed with encoding: {encoding}",
        "file_parser",
        details={"file_path": str(path_obj), "encoding": encoding}
    )
    return result


def _create_error_result(
    error_message: str,
    correlation_id: Optional[str],
    start_time: float
) -> ParseResult:
    """Create an unsuccessful result holding an empty document."""
    result = ParseResult(correlation_id=correlation_id)
    result.success = False
    result.performance.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
    result.add_diagnostic(
        DiagnosticSeverity.CRITICAL,
        error_message,
        "api_parser"
    )
    return result


class HTMLParser:
    """Reusable parser with a fixed configuration and usage statistics.

    Examples:
        >>> parser = HTMLParser(ParserConfig.strict())
        >>> result = parser.parse('<div><p>a</div>')
        >>> parser.statistics["total_parses"]
        1
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "html_parser")
        self._tree_builder = HTMLTreeBuilder(
            config=self.config.tree, correlation_id=self.correlation_id
        )
        self.reset_statistics()

    def tokenize(self, html: str) -> HTMLTokenizer:
        """Create a tokenizer over ``html`` using this parser's configuration."""
        return HTMLTokenizer(
            html, config=self.config.tokenizer, correlation_id=self.correlation_id
        )

    def parse(self, html: str) -> ParseResult:
        """Parse ``html`` with the configured tokenizer and tree builder."""
        result = self._tree_builder.build(self.tokenize(html))

        self._parse_count += 1
        self._total_processing_time += result.performance.processing_time_ms
        if result.success:
            self._successful_parses += 1

        self.logger.debug(
            "Configured parse completed",
            extra={
                "success": result.success,
                "total_parses": self._parse_count,
            }
        )
        return result

    def reconfigure(self, config: ParserConfig) -> None:
        """Replace the configuration used by subsequent parses."""
        self.config = config
        self._tree_builder = HTMLTreeBuilder(
            config=config.tree, correlation_id=self.correlation_id
        )
        self.logger.info("Parser reconfigured", extra={"config_name": config.name})

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0
