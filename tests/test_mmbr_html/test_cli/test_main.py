"""Tests for the CLI main module."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from mmbr_html import __version__
from mmbr_html.cli.main import create_argument_parser, load_config, main
from mmbr_html.shared import EndTagMatching, ParserConfig


class TestArgumentParser:
    """Test command-line argument parsing."""

    def test_parse_command(self):
        """Test parse subcommand arguments."""
        args = create_argument_parser().parse_args(
            ["parse", "a.html", "b.html", "--format", "json", "--strict-end-tags"]
        )
        assert args.command == "parse"
        assert args.paths == [Path("a.html"), Path("b.html")]
        assert args.format == "json"
        assert args.strict_end_tags is True

    def test_tokens_command(self):
        """Test tokens subcommand arguments."""
        args = create_argument_parser().parse_args(["tokens", "-e", "<p>"])
        assert args.command == "tokens"
        assert args.html == "<p>"
        assert args.format == "text"

    def test_version(self, capsys):
        """Test --version prints the package version."""
        with pytest.raises(SystemExit):
            main(["--version"])
        assert __version__ in capsys.readouterr().out


class TestLoadConfig:
    """Test configuration loading from arguments."""

    def test_defaults(self):
        """Test no flags yields the default configuration."""
        args = create_argument_parser().parse_args(["parse", "-e", "x"])
        assert load_config(args) == ParserConfig()

    def test_config_file_and_flag(self, tmp_path):
        """Test a configuration file is loaded and flags override it."""
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"tree": {"max_tree_depth": 7}}))

        args = create_argument_parser().parse_args(
            ["--config", str(config_path), "parse", "--strict-end-tags", "-e", "x"]
        )
        config = load_config(args)

        assert config.tree.max_tree_depth == 7
        assert config.tree.end_tag_matching is EndTagMatching.MATCH_NAME


class TestParseCommand:
    """Test the parse command end to end."""

    def test_inline_tree_output(self, capsys):
        """Test inline HTML is printed as an outline."""
        assert main(["parse", "-e", "<html><p>hi</p></html>"]) == 0
        out = capsys.readouterr().out
        assert out.splitlines() == ["#document", "  html", "    p", '      "hi"']

    def test_json_output(self, capsys):
        """Test JSON output contains the document and summary."""
        assert main(["parse", "-e", "<div>a</div>", "--format", "json"]) == 0
        data = json.loads(capsys.readouterr().out)

        assert data[0]["source"] == "<string>"
        assert data[0]["document"]["children"][0]["tag"] == "div"
        assert data[0]["summary"]["element_count"] == 1

    def test_summary_output(self, capsys):
        """Test summary output is JSON."""
        assert main(["parse", "-e", "<p>x", "--format", "summary"]) == 0
        assert json.loads(capsys.readouterr().out)["unclosed_elements"] == 1

    def test_diagnostics_go_to_stderr(self, capsys):
        """Test diagnostics are reported on stderr."""
        assert main(["parse", "-e", "<table>"]) == 0
        assert "WARNING: Skipped unsupported start tag" in capsys.readouterr().err

    def test_strict_end_tags(self, capsys):
        """Test the strict flag changes the tree."""
        main(["parse", "-e", "<div><p>a</div>b", "--strict-end-tags", "--format", "json"])
        document = json.loads(capsys.readouterr().out)[0]["document"]
        assert [child["type"] for child in document["children"]] == ["element", "text"]

    def test_files(self, tmp_path, capsys):
        """Test several files are parsed with headers."""
        first = tmp_path / "one.html"
        first.write_text("<p>1</p>")
        second = tmp_path / "two.html"
        second.write_text("<span>2</span>")

        assert main(["parse", str(first), str(second)]) == 0
        out = capsys.readouterr().out
        assert f"== {first}" in out
        assert "span" in out

    def test_missing_file_fails(self, tmp_path, capsys):
        """Test a missing file yields exit code 1."""
        assert main(["parse", str(tmp_path / "nope.html")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_no_input(self, capsys):
        """Test parse without input fails."""
        assert main(["parse"]) == 1
        assert "provide file paths" in capsys.readouterr().err


class TestTokensCommand:
    """Test the tokens command."""

    def test_text_output(self, capsys):
        """Test tokens are printed one per line."""
        assert main(["tokens", "-e", "<p>a</p>"]) == 0
        assert capsys.readouterr().out.splitlines() == [
            "StartTag('p')",
            "Char('a')",
            "EndTag('p')",
            "Eof",
        ]

    def test_json_output(self, capsys):
        """Test JSON output includes positions."""
        assert main(["tokens", "-e", "x<p>", "--format", "json"]) == 0
        tokens = json.loads(capsys.readouterr().out)

        assert tokens[1] == {
            "type": "START_TAG",
            "value": "p",
            "position": {"line": 1, "column": 2, "offset": 1},
        }
        assert tokens[-1]["type"] == "EOF"

    def test_file_input(self, tmp_path, capsys):
        """Test tokens can be read from a file."""
        path = tmp_path / "page.html"
        path.write_text("<h1>")
        assert main(["tokens", str(path)]) == 0
        assert "StartTag('h1')" in capsys.readouterr().out

    def test_unreadable_file(self, tmp_path, capsys):
        """Test a missing file is reported."""
        assert main(["tokens", str(tmp_path / "missing.html")]) == 1
        assert "cannot read" in capsys.readouterr().err

    def test_no_input(self, capsys):
        """Test tokens without input fails."""
        assert main(["tokens"]) == 1


class TestMain:
    """Test top-level error handling."""

    def test_no_command(self, capsys):
        """Test no command prints help and fails."""
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_invalid_config_file(self, tmp_path, capsys):
        """Test a malformed configuration file fails cleanly."""
        config_path = tmp_path / "bad.json"
        config_path.write_text("{broken")

        assert main(["--config", str(config_path), "parse", "-e", "x"]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_undecodable_config_file(self, tmp_path, capsys):
        """Test a configuration file that is not UTF-8 fails cleanly."""
        config_path = tmp_path / "latin.json"
        config_path.write_bytes(b'{"name": "caf\xe9"}')

        assert main(["--config", str(config_path), "parse", "-e", "x"]) == 1
        assert "not valid UTF-8" in capsys.readouterr().err

    def test_missing_config_file(self, tmp_path):
        """Test a missing configuration file fails cleanly."""
        assert main(["--config", str(tmp_path / "none.json"), "parse", "-e", "x"]) == 1

    def test_keyboard_interrupt(self, capsys):
        """Test interruption exits with 130."""
        with patch("mmbr_html.cli.main.cmd_parse", side_effect=KeyboardInterrupt):
            assert main(["parse", "-e", "x"]) == 130
        assert "interrupted" in capsys.readouterr().err
