"""Tree construction for the HTML parsing pipeline.

This module drives an insertion-mode state machine over a token sequence and
materializes the parsed document as a ``Node`` tree, using a stack of open
elements to track the current insertion point.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from mmbr_html.dom import ElementKind, Node
from mmbr_html.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    EndTagMatching,
    HTMLParserError,
    PerformanceMetrics,
    TreeConfig,
    get_logger,
)
from mmbr_html.tokenization import HTMLTokenizer, Token, TokenType

# Characters discarded before the html element is opened
_WHITESPACE = frozenset(" \t\n\f\r")

# Elements the body insertion mode creates and closes
BODY_CONTENT_KINDS: FrozenSet[ElementKind] = frozenset({
    ElementKind.P,
    ElementKind.DIV,
    ElementKind.SPAN,
    ElementKind.H1,
    ElementKind.H2,
})

# End tags that are not ignored before the html element is opened
_BEFORE_HTML_END_TAGS = frozenset({"head", "body", "html", "br"})


class InsertionMode(Enum):
    """Insertion modes of the tree builder."""

    INITIAL = auto()
    BEFORE_HTML = auto()
    BEFORE_HEAD = auto()
    IN_HEAD = auto()
    AFTER_HEAD = auto()
    IN_BODY = auto()
    TEXT = auto()
    AFTER_BODY = auto()


_TERMINAL_MODES = frozenset({InsertionMode.TEXT, InsertionMode.AFTER_BODY})

_LOG_LEVELS = {
    DiagnosticSeverity.DEBUG: logging.DEBUG,
    DiagnosticSeverity.INFO: logging.DEBUG,
    DiagnosticSeverity.WARNING: logging.WARNING,
    DiagnosticSeverity.ERROR: logging.ERROR,
    DiagnosticSeverity.CRITICAL: logging.CRITICAL,
}


@dataclass
class ParseResult:
    """Result of a tree building run.

    The document is always present: whatever was built before end of input
    or a fatal condition is kept.
    """

    document: Node = field(default_factory=Node.document)
    success: bool = True
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None
    final_mode: Optional[InsertionMode] = None
    unclosed_elements: int = 0

    @property
    def element_count(self) -> int:
        """Number of Element nodes in the document."""
        return sum(1 for node in self.document.iter_descendants() if node.is_element)

    @property
    def text_node_count(self) -> int:
        """Number of Text nodes in the document."""
        return sum(1 for node in self.document.iter_descendants() if node.is_text)

    @property
    def max_depth(self) -> int:
        return max(
            (node.get_depth() for node in self.document.iter_descendants()),
            default=0,
        )

    @property
    def processing_time_ms(self) -> float:
        return self.performance.processing_time_ms

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id
        ))

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for the parse result."""
        by_severity: Dict[str, int] = {}
        for diagnostic in self.diagnostics:
            name = diagnostic.severity.name
            by_severity[name] = by_severity.get(name, 0) + 1

        return {
            "success": self.success,
            "element_count": self.element_count,
            "text_node_count": self.text_node_count,
            "max_depth": self.max_depth,
            "unclosed_elements": self.unclosed_elements,
            "final_mode": self.final_mode.name if self.final_mode else None,
            "diagnostics_by_severity": by_severity,
            "processing_time_ms": self.performance.processing_time_ms,
            "tokens_consumed": self.performance.tokens_consumed,
            "characters_processed": self.performance.characters_processed,
            "nodes_created": self.performance.nodes_created,
        }


class HTMLTreeBuilder:
    """Builds a document tree from a token sequence.

    Each mode handler returns ``True`` when the current token has to be
    reprocessed under the mode it switched to.
    """

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Tree construction configuration
            correlation_id: Optional correlation ID for parse tracking
        """
        self.config = config or TreeConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "html_tree_builder")

        self._handlers: Dict[InsertionMode, Callable[[Token], bool]] = {
            InsertionMode.INITIAL: self._handle_initial,
            InsertionMode.BEFORE_HTML: self._handle_before_html,
            InsertionMode.BEFORE_HEAD: self._handle_before_head,
            InsertionMode.IN_HEAD: self._handle_in_head,
            InsertionMode.AFTER_HEAD: self._handle_after_head,
            InsertionMode.IN_BODY: self._handle_in_body,
        }
        self.reset()

    def reset(self) -> None:
        """Start a fresh document and clear all construction state."""
        self.mode = InsertionMode.INITIAL
        self._document = Node.document()
        self._open_elements: List[Node] = []
        self._skipped_start_tags: List[ElementKind] = []
        self._stopped = False
        self._result = ParseResult(
            document=self._document, correlation_id=self.correlation_id
        )

    @property
    def document(self) -> Node:
        return self._document

    @property
    def open_elements(self) -> Tuple[Node, ...]:
        """Snapshot of the stack of open elements, bottom first."""
        return tuple(self._open_elements)

    @property
    def current_node(self) -> Node:
        """Current insertion point: stack top, or the document when empty."""
        if self._open_elements:
            return self._open_elements[-1]
        return self._document

    @property
    def stopped(self) -> bool:
        """True once end of input or a terminal mode has been reached."""
        return self._stopped

    def build(self, tokens: Iterable[Token]) -> ParseResult:
        """Build a document tree from a token sequence.

        Fatal parser errors are recorded as CRITICAL diagnostics; the tree
        built up to that point is still returned.

        Args:
            tokens: Any iterable of tokens, typically an ``HTMLTokenizer``

        Returns:
            ParseResult containing the document and diagnostics
        """
        start_time = time.time()
        self.reset()
        result = self._result

        self.logger.debug("Starting tree construction")

        try:
            self._consume(tokens)
        except HTMLParserError as e:
            self.logger.error(
                "Tree construction aborted",
                extra={"error": str(e), "mode": self.mode.name},
            )
            result.success = False
            result.add_diagnostic(
                DiagnosticSeverity.CRITICAL,
                f"Tree construction aborted: {e}",
                "html_tree_builder",
                details={"exception_type": type(e).__name__},
            )

        result.final_mode = self.mode
        result.unclosed_elements = len(self._open_elements)
        result.performance.processing_time_ms = (time.time() - start_time) * 1000
        if isinstance(tokens, HTMLTokenizer):
            result.performance.characters_processed = tokens.characters_consumed

        self.logger.info(
            "Tree construction completed",
            extra={
                "success": result.success,
                "tokens_consumed": result.performance.tokens_consumed,
                "nodes_created": result.performance.nodes_created,
                "unclosed_elements": result.unclosed_elements,
            },
        )
        return result

    def construct_tree(self, tokens: Iterable[Token]) -> Node:
        """Consume ``tokens`` and return the document root.

        Unlike ``build``, fatal errors propagate to the caller.
        """
        self.reset()
        self._consume(tokens)
        return self._document

    def _consume(self, tokens: Iterable[Token]) -> None:
        for token in tokens:
            if not self.process_token(token):
                break

    def process_token(self, token: Token) -> bool:
        """Dispatch a single token under the current insertion mode.

        Returns:
            False once processing has ended and no further tokens are wanted
        """
        if self._stopped:
            return False

        self._result.performance.tokens_consumed += 1
        reprocess = True
        while reprocess:
            if self.mode in _TERMINAL_MODES:
                self._stopped = True
                break
            reprocess = self._handlers[self.mode](token)
            if self._stopped:
                break

        if self.mode in _TERMINAL_MODES:
            self._stopped = True
        return not self._stopped

    # Insertion mode handlers

    def _handle_initial(self, token: Token) -> bool:
        self._switch_mode(InsertionMode.BEFORE_HTML)
        return True

    def _handle_before_html(self, token: Token) -> bool:
        if token.type is TokenType.CHAR and token.value in _WHITESPACE:
            return False
        if token.type is TokenType.START_TAG and token.value.lower() == "html":
            self._insert_element(ElementKind.HTML, token)
            self._switch_mode(InsertionMode.BEFORE_HEAD)
            return False
        if (
            token.type is TokenType.END_TAG
            and token.value.lower() not in _BEFORE_HTML_END_TAGS
        ):
            self._report(
                DiagnosticSeverity.INFO,
                "Ignored end tag before html element",
                token,
            )
            return False
        if token.type is TokenType.EOF:
            self._stopped = True
            return False
        self._switch_mode(InsertionMode.BEFORE_HEAD)
        return True

    def _handle_before_head(self, token: Token) -> bool:
        self._switch_mode(InsertionMode.IN_HEAD)
        return True

    def _handle_in_head(self, token: Token) -> bool:
        self._switch_mode(InsertionMode.AFTER_HEAD)
        return True

    def _handle_after_head(self, token: Token) -> bool:
        if token.type is TokenType.START_TAG:
            name = token.value.lower()
            if name == "body":
                self._insert_element(ElementKind.BODY, token)
                self._switch_mode(InsertionMode.IN_BODY)
                return False
            if name == "head":
                self._report(
                    DiagnosticSeverity.INFO, "Ignored head start tag after head", token
                )
                return False
        self._switch_mode(InsertionMode.IN_BODY)
        return True

    def _handle_in_body(self, token: Token) -> bool:
        if token.type is TokenType.CHAR:
            self._insert_character(token.value)
        elif token.type is TokenType.START_TAG:
            kind = self._body_content_kind(token)
            if kind is None:
                self._report(
                    DiagnosticSeverity.WARNING, "Skipped unsupported start tag", token
                )
            else:
                self._insert_element(kind, token)
        elif token.type is TokenType.END_TAG:
            if token.value.lower() == "html":
                self._switch_mode(InsertionMode.AFTER_BODY)
                return False
            if ElementKind.is_supported(token.value):
                self._close_element(ElementKind.from_tag_name(token.value), token)
            else:
                self._report(
                    DiagnosticSeverity.WARNING, "Skipped unsupported end tag", token
                )
        elif token.type is TokenType.EOF:
            self._stopped = True
        return False

    # Tree mutation

    def _insert_character(self, c: str) -> None:
        target = self.current_node
        last = target.last_child
        if last is not None and last.is_text:
            last.append_data(c)
            return

        target.append_child(Node.text(c))
        self._result.performance.nodes_created += 1

    def _insert_element(self, kind: ElementKind, token: Token) -> None:
        if len(self._open_elements) >= self.config.max_tree_depth:
            self._skipped_start_tags.append(kind)
            self._report(
                DiagnosticSeverity.ERROR,
                "Skipped start tag beyond maximum tree depth",
                token,
                details={"max_tree_depth": self.config.max_tree_depth},
            )
            return

        node = self.current_node.append_child(Node.element(kind))
        self._open_elements.append(node)
        self._result.performance.nodes_created += 1

    def _close_element(self, kind: ElementKind, token: Token) -> None:
        # End tags of elements skipped at the depth limit close nothing
        if self._skipped_start_tags:
            skipped = self._skipped_start_tags.pop()
            self._report(
                DiagnosticSeverity.ERROR,
                "Skipped end tag of element beyond maximum tree depth",
                token,
                details={"skipped_kind": skipped.tag_name},
            )
            return

        if not self._open_elements:
            self._report(
                DiagnosticSeverity.WARNING,
                "Ignored end tag with no open element",
                token,
            )
            return

        if self.config.end_tag_matching is EndTagMatching.POP_TOP:
            self._open_elements.pop()
            return

        for index in range(len(self._open_elements) - 1, -1, -1):
            if self._open_elements[index].element_kind is kind:
                del self._open_elements[index:]
                return

        self._report(
            DiagnosticSeverity.WARNING,
            "Ignored end tag with no matching open element",
            token,
        )

    # Helpers

    def _body_content_kind(self, token: Token) -> Optional[ElementKind]:
        if not ElementKind.is_supported(token.value):
            return None
        kind = ElementKind.from_tag_name(token.value)
        return kind if kind in BODY_CONTENT_KINDS else None

    def _switch_mode(self, mode: InsertionMode) -> None:
        self.logger.debug(
            "Insertion mode switch",
            extra={"from_mode": self.mode.name, "to_mode": mode.name},
        )
        self.mode = mode

    def _report(
        self,
        severity: DiagnosticSeverity,
        message: str,
        token: Token,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        position = token.position.to_dict() if token.position else {}
        logger = self.logger.bind(token=str(token), mode=self.mode.name, **position)
        logger.log(_LOG_LEVELS[severity], message, extra=details)

        if self.config.record_diagnostics:
            self._result.add_diagnostic(
                severity,
                f"{message}: {token}",
                "html_tree_builder",
                position=token.position.to_dict() if token.position else None,
                details={"mode": self.mode.name, **(details or {})},
            )


def construct_tree(
    tokens: Iterable[Token],
    config: Optional[TreeConfig] = None,
    correlation_id: Optional[str] = None,
) -> Node:
    """Consume a token sequence and return the document root."""
    return HTMLTreeBuilder(config, correlation_id).construct_tree(tokens)
