"""Tests for the public parsing API."""

from pathlib import Path

import pytest

from mmbr_html.api import HTMLParser, construct_tree, parse_file, parse_string, tokenize
from mmbr_html.dom import ElementKind
from mmbr_html.shared import DiagnosticSeverity, EndTagMatching, ParserConfig


class TestCoreBoundary:
    """Test tokenize and construct_tree composed by hand."""

    def test_pipeline(self) -> None:
        """Test the two stages compose into a document."""
        doc = construct_tree(tokenize("<html>hello</html>"))
        assert doc.first_child.element_kind is ElementKind.HTML
        assert doc.text_content == "hello"


class TestParseString:
    """Test parse_string."""

    def test_basic(self) -> None:
        """Test a simple document parses successfully."""
        result = parse_string("<div><p>a</p>b</div>")

        assert result.success
        assert result.element_count == 2
        assert result.text_node_count == 2
        assert result.diagnostics == []

    def test_config_is_applied(self) -> None:
        """Test the tree configuration reaches the builder."""
        html = "<div><p>a</div>b"
        lenient = parse_string(html)
        strict = parse_string(html, config=ParserConfig.strict())

        assert lenient.document.find(ElementKind.DIV).text_content == "ab"
        assert strict.document.find(ElementKind.DIV).text_content == "a"

    def test_correlation_id_propagates(self) -> None:
        """Test diagnostics carry the correlation ID."""
        result = parse_string("<table>", correlation_id="req-1")
        assert result.correlation_id == "req-1"
        assert result.diagnostics[0].correlation_id == "req-1"

    def test_correlation_id_from_config(self) -> None:
        """Test the configured correlation ID is used by default."""
        result = parse_string("x", config=ParserConfig(correlation_id="cfg-1"))
        assert result.correlation_id == "cfg-1"

    def test_characters_processed(self) -> None:
        """Test the whole input is accounted for."""
        result = parse_string("<p>abc</p>")
        assert result.performance.characters_processed == 10
        assert result.processing_time_ms >= 0


class TestParseFile:
    """Test parse_file and its error results."""

    def test_parse_file(self, tmp_path: Path) -> None:
        """Test a file is read and parsed."""
        path = tmp_path / "page.html"
        path.write_text("<html><h1>Title</h1></html>", encoding="utf-8")

        result = parse_file(path)

        assert result.success
        assert result.document.find(ElementKind.H1).text_content == "Title"
        info = result.get_diagnostics_by_severity(DiagnosticSeverity.INFO)
        assert info[-1].message == "File parsed with encoding: utf-8"
        assert info[-1].component == "file_parser"

    def test_parse_file_with_encoding(self, tmp_path: Path) -> None:
        """Test a non-default encoding is honored."""
        path = tmp_path / "latin.html"
        path.write_bytes("<p>caf\xe9</p>".encode("latin-1"))

        result = parse_file(str(path), encoding="latin-1")
        assert result.document.text_content == "caf\xe9"

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file produces an unsuccessful result."""
        result = parse_file(tmp_path / "missing.html")

        assert not result.success
        assert result.document.first_child is None
        critical = result.get_diagnostics_by_severity(DiagnosticSeverity.CRITICAL)
        assert critical[0].message.startswith("File not found")
        assert critical[0].component == "api_parser"

    def test_directory(self, tmp_path: Path) -> None:
        """Test a directory is rejected."""
        result = parse_file(tmp_path)
        assert not result.success
        assert "Path is not a file" in result.diagnostics[0].message

    def test_undecodable_file(self, tmp_path: Path) -> None:
        """Test decoding errors are reported, not raised."""
        path = tmp_path / "bad.html"
        path.write_bytes(b"<p>\xff\xfe</p>")

        result = parse_file(path)
        assert not result.success
        assert result.diagnostics[0].message.startswith("Cannot decode")

    def test_unknown_encoding(self, tmp_path: Path) -> None:
        """Test an unknown encoding name is reported."""
        path = tmp_path / "page.html"
        path.write_text("<p>x</p>")

        result = parse_file(path, encoding="no-such-encoding")
        assert not result.success
        assert result.has_errors()


class TestHTMLParser:
    """Test the reusable parser class."""

    def test_parse_and_statistics(self) -> None:
        """Test statistics track parses."""
        parser = HTMLParser(correlation_id="stats")
        parser.parse("<p>a</p>")
        parser.parse("<div>b</div>")

        stats = parser.statistics
        assert stats["total_parses"] == 2
        assert stats["successful_parses"] == 2
        assert stats["success_rate"] == 1.0
        assert stats["correlation_id"] == "stats"

    def test_empty_statistics(self) -> None:
        """Test statistics before any parse."""
        assert HTMLParser().statistics["success_rate"] == 0.0

    def test_reset_statistics(self) -> None:
        """Test statistics can be cleared."""
        parser = HTMLParser()
        parser.parse("x")
        parser.reset_statistics()
        assert parser.statistics["total_parses"] == 0

    def test_results_are_independent(self) -> None:
        """Test each parse returns its own document."""
        parser = HTMLParser()
        first = parser.parse("<p>a</p>")
        second = parser.parse("<span>b</span>")

        assert first.document.find(ElementKind.P) is not None
        assert second.document.find(ElementKind.P) is None

    def test_reconfigure(self) -> None:
        """Test a new configuration applies to later parses."""
        parser = HTMLParser()
        parser.reconfigure(ParserConfig.strict())

        assert parser.config.tree.end_tag_matching is EndTagMatching.MATCH_NAME
        result = parser.parse("<div><p>a</div>b")
        assert result.document.find(ElementKind.DIV).text_content == "a"

    def test_tokenize_uses_config(self) -> None:
        """Test the tokenizer configuration is applied."""
        config = ParserConfig().override(tokenizer__lowercase_tag_names=False)
        tokens = list(HTMLParser(config).tokenize("<P>"))
        assert tokens[0].value == "P"

    @pytest.mark.parametrize("html", ["", "   ", "<", "</>", "<html></html>"])
    def test_degenerate_inputs_succeed(self, html: str) -> None:
        """Test malformed or empty inputs never fail."""
        assert HTMLParser().parse(html).success
