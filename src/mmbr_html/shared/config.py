"""Configuration classes for the HTML parsing pipeline.

This module provides configuration objects for the tokenizer and the tree
builder, plus an immutable aggregate that can be serialized to and from JSON.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, Dict, Optional

from .exceptions import ConfigValidationError

_COMPONENT_FIELDS = ("tokenizer", "tree")


class EndTagMatching(Enum):
    """How the tree builder closes elements on a recognized end tag."""

    POP_TOP = auto()      # Pop the current node regardless of its name
    MATCH_NAME = auto()   # Pop up to and including the nearest same-named element


@dataclass
class TokenizerConfig:
    """Configuration for the character-level tokenizer."""

    lowercase_tag_names: bool = True
    track_positions: bool = True

    def __post_init__(self) -> None:
        """Validate tokenizer configuration."""
        if not isinstance(self.lowercase_tag_names, bool):
            raise ValueError("lowercase_tag_names must be a bool")
        if not isinstance(self.track_positions, bool):
            raise ValueError("track_positions must be a bool")


@dataclass
class TreeConfig:
    """Configuration for tree construction."""

    end_tag_matching: EndTagMatching = EndTagMatching.POP_TOP
    max_tree_depth: int = 512
    record_diagnostics: bool = True

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if isinstance(self.end_tag_matching, str):
            try:
                self.end_tag_matching = EndTagMatching[self.end_tag_matching.upper()]
            except KeyError as e:
                raise ValueError(
                    f"end_tag_matching must be one of "
                    f"{[m.name for m in EndTagMatching]}"
                ) from e
        if not isinstance(self.end_tag_matching, EndTagMatching):
            raise ValueError("end_tag_matching must be an EndTagMatching value")
        if self.max_tree_depth <= 0:
            raise ValueError("max_tree_depth must be > 0")


@dataclass(frozen=True)
class ParserConfig:
    """Immutable configuration for the complete parsing pipeline.

    Component configurations validate themselves; this class wraps their
    failures in ``ConfigValidationError`` so callers handle a single type.
    """

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    correlation_id: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        if not isinstance(self.tokenizer, TokenizerConfig):
            raise ConfigValidationError(
                "tokenizer must be a TokenizerConfig", field_name="tokenizer"
            )
        if not isinstance(self.tree, TreeConfig):
            raise ConfigValidationError(
                "tree must be a TreeConfig", field_name="tree"
            )
        try:
            self.tokenizer.__post_init__()
            self.tree.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Nested fields use double-underscore notation.

        Example:
            >>> config = ParserConfig()
            >>> strict = config.override(tree__end_tag_matching="MATCH_NAME")
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENT_FIELDS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENT_FIELDS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        try:
            for component in _COMPONENT_FIELDS:
                current = getattr(self, component)
                overrides = nested_overrides.pop(component, None)
                if isinstance(overrides, dict):
                    new_fields[component] = replace(current, **overrides)
                elif overrides is not None:
                    new_fields[component] = overrides
            new_fields.update(nested_overrides)
            return replace(self, **new_fields)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary."""
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration data must be a mapping")

        try:
            tokenizer = TokenizerConfig(**data.get("tokenizer", {}))
            tree = TreeConfig(**data.get("tree", {}))
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

        return cls(
            tokenizer=tokenizer,
            tree=tree,
            correlation_id=data.get("correlation_id"),
            name=data.get("name"),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def lenient(cls) -> "ParserConfig":
        """Preset that pops the current node on any recognized end tag."""
        return cls(
            tree=TreeConfig(end_tag_matching=EndTagMatching.POP_TOP),
            name="lenient",
        )

    @classmethod
    def strict(cls) -> "ParserConfig":
        """Preset that only closes elements whose name matches the end tag."""
        return cls(
            tree=TreeConfig(end_tag_matching=EndTagMatching.MATCH_NAME),
            name="strict",
        )
