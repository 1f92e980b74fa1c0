"""Heading detection rules and the priority-ordered rule engine.

A ``ChunkingRule`` recognizes one kind of heading line (markdown ATX headings,
decimal outlines, statute sections, appendices, roman numeral and lettered
sections). The ``RuleEngine`` tries its rules in ascending priority order and
reports the first match for a line.

Example:
    >>> engine = RuleEngine(create_default_rules())
    >>> match = engine.try_match("1.2 Scope")
    >>> (match.chunk_type, match.level, match.clean_title)
    ('Numeric', 2, 'Scope')
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from structure_chunker.lib.errors import RuleError

LevelFunction = Callable[[re.Match[str]], int]


@dataclass(frozen=True)
class RuleMatch:
    """Result of a rule matching a heading line.

    Attributes:
        chunk_type: Name of the rule that matched
        level: Hierarchy level for the heading (1 or greater)
        raw_title: The matched text, trimmed
        clean_title: The heading title without its marker
    """

    chunk_type: str
    level: int
    raw_title: str
    clean_title: str


def outline_depth(match: re.Match[str]) -> int:
    """Level for decimal outline markers: "1." -> 1, "1.2" -> 2, "1.2.3." -> 3."""
    marker = match.group(1).rstrip(".")
    return marker.count(".") + 1


@dataclass(frozen=True)
class ChunkingRule:
    """A pattern that recognizes one kind of heading line.

    The pattern is matched at the start of the line. Its last capture group is
    the clean title; without capture groups the whole match is used.

    Attributes:
        name: Rule name, recorded as the chunk type of matching chunks
        pattern: Regex (compiled, or a string to compile)
        level: Fixed heading level; when None the level comes from
            ``level_function``, or 1 if that is also None
        priority: Lower values are tried first
        level_function: Computes the level from the match

    Raises:
        RuleError: If the name is blank, the pattern does not compile, or the
            fixed level is below 1
    """

    name: str
    pattern: re.Pattern[str] | str
    level: int | None = None
    priority: int = 0
    level_function: LevelFunction | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise RuleError("<unnamed>", "Rule name cannot be empty")
        if isinstance(self.pattern, str):
            try:
                object.__setattr__(self, "pattern", re.compile(self.pattern))
            except re.error as e:
                raise RuleError(self.name, f"Invalid pattern: {e}") from e
        if self.level is not None and self.level < 1:
            raise RuleError(self.name, f"Level must be 1 or greater, got {self.level}")

    @property
    def is_dynamic(self) -> bool:
        """True when the level is computed from the match."""
        return self.level is None

    def try_match(self, line: str) -> RuleMatch | None:
        """Match the rule against one line.

        Args:
            line: A single line of text, without its terminator

        Returns:
            The match details, or None if the line is not this kind of heading
        """
        # re.compile returns an already compiled pattern unchanged
        match = re.compile(self.pattern).match(line)
        if match is None:
            return None

        return RuleMatch(
            chunk_type=self.name,
            level=self._resolve_level(match),
            raw_title=match.group(0).strip(),
            clean_title=self._clean_title(match),
        )

    def _resolve_level(self, match: re.Match[str]) -> int:
        if self.level is not None:
            return self.level
        if self.level_function is None:
            return 1
        return max(1, self.level_function(match))

    @staticmethod
    def _clean_title(match: re.Match[str]) -> str:
        if match.re.groups == 0:
            return match.group(0).strip()
        return (match.group(match.re.groups) or "").strip()


def create_default_rules() -> list[ChunkingRule]:
    """Build the default heading rules.

    Markdown headings H1-H6 come first (priorities 1-6), followed by decimal
    outlines, statute sections, appendices, roman numeral sections and
    lettered sections.
    """
    rules = [
        ChunkingRule(
            name=f"MarkdownH{level}",
            pattern=re.compile(rf"^#{{{level}}}\s+(.*)"),
            level=level,
            priority=level,
        )
        for level in range(1, 7)
    ]
    rules.extend(
        [
            ChunkingRule(
                name="Numeric",
                pattern=re.compile(r"^(\d+(?:\.\d+)*\.?)\s+(.*)"),
                priority=10,
                level_function=outline_depth,
            ),
            ChunkingRule(
                name="Legal",
                pattern=re.compile(r"^(§\s*\d+(?:\.\d+)*)\s+(.*)"),
                level=1,
                priority=20,
            ),
            ChunkingRule(
                name="Appendix",
                pattern=re.compile(r"^Appendix\s+([A-Z])[\.:\-\s]+(.*)"),
                level=1,
                priority=30,
            ),
            ChunkingRule(
                name="Roman",
                pattern=re.compile(r"^([IVX]+)\.\s+(.*)"),
                level=1,
                priority=40,
            ),
            ChunkingRule(
                name="Letter",
                pattern=re.compile(r"^([A-Z])\.\s+(.*)"),
                level=1,
                priority=50,
            ),
        ]
    )
    return rules


class RuleEngine:
    """Evaluates heading rules against lines in priority order.

    Rules with equal priority keep their given order.

    Raises:
        RuleError: If no rules are supplied
    """

    def __init__(self, rules: Iterable[ChunkingRule]) -> None:
        """Initialize the engine with a rule set."""
        ordered = sorted(rules, key=lambda rule: rule.priority)
        if not ordered:
            raise RuleError("rules", "At least one chunking rule is required")
        self._rules: tuple[ChunkingRule, ...] = tuple(ordered)

    @property
    def rules(self) -> tuple[ChunkingRule, ...]:
        """Rules in evaluation order."""
        return self._rules

    def try_match(self, line: str) -> RuleMatch | None:
        """Return the first matching rule's result for a line.

        Blank and whitespace-only lines never match.
        """
        if not line or not line.strip():
            return None
        for rule in self._rules:
            match = rule.try_match(line)
            if match is not None:
                return match
        return None
