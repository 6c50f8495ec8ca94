#!/usr/bin/env python3
"""
cleaner.py - Rule Text Sanitizer

Every piece of rule text that enters the checker from a list download or a
rule file is passed through ``sanitize()`` before it reaches the matching
engine.

Unlike a DNS-level blocker, the matching engine understands the full filter
syntax: cosmetic rules (##, #@#, #?#, ...) and request-type modifiers
($script, $image, $third-party, ...) are meaningful to it and are KEPT.
The sanitizer only removes text that is not a rule at all.

Key Operations:
    1. Strip surrounding whitespace (including CR from CRLF files)
    2. Drop empty lines
    3. Drop comments (! lines, and # lines that are not cosmetic markers)
    4. Drop list headers such as [Adblock Plus 2.0]
    5. Strip trailing inline comments (" # ...")

Idempotence:
    Aggregated lists are sanitized per part and again after joining, so
    sanitize(sanitize(x)) must equal sanitize(x). Every kept line is already
    a fixed point of clean_line(), which guarantees it.
"""
from __future__ import annotations

import re
from typing import Final, NamedTuple


# =============================================================================
# REGEX PATTERNS
# =============================================================================

#: Comment line: starts with !, or with # not followed by a cosmetic marker
#: Example: "! Title: EasyList", "# hosts comment" (but not "##.ad-banner")
COMMENT_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\s*(?:!|#(?![#@$?%]))")

#: List header: [Adblock Plus 2.0], [uBlock Origin], [AdGuard]
HEADER_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^\[\s*(?:adblock|ublock|adguard)[^\]]*\]$",
    re.IGNORECASE,
)

#: Cosmetic/element-hiding/scriptlet markers: ## #@# #?# #$# #@$?# #%# ...
COSMETIC_PATTERN: Final[re.Pattern[str]] = re.compile(r"#[@$?%]*#")

#: Trailing inline comment: match " # comment" (space before and after #)
#: Example: "||example.com^ # block ads" → "||example.com^"
TRAILING_COMMENT_PATTERN: Final[re.Pattern[str]] = re.compile(r"\s+#\s+.*$")


# =============================================================================
# DATA STRUCTURES
# =============================================================================

class CleanResult(NamedTuple):
    """
    Result of cleaning a single line.

    Attributes:
        line: Cleaned line, or None if discarded
        discarded: True if line was discarded
        reason: Reason for discard ("empty", "comment", "header"), or None
    """
    line: str | None
    discarded: bool
    reason: str | None


# =============================================================================
# CLASSIFICATION
# =============================================================================

def is_comment(line: str) -> bool:
    """
    Check if line is a comment.

    Example:
        >>> is_comment("! Title: EasyList")
        True
        >>> is_comment("# hosts style comment")
        True
        >>> is_comment("##.ad-banner")
        False
    """
    return bool(COMMENT_PATTERN.match(line))


def is_header(line: str) -> bool:
    return bool(HEADER_PATTERN.match(line.strip()))


def is_cosmetic_rule(line: str) -> bool:
    """
    Check if line is a cosmetic/element-hiding/scriptlet rule.

    Example:
        >>> is_cosmetic_rule("example.com##.ad-banner")
        True
        >>> is_cosmetic_rule("||example.com^")
        False
    """
    return bool(COSMETIC_PATTERN.search(line))


def is_exception_rule(line: str) -> bool:
    """Check if line is a network exception (allow) rule."""
    return line.startswith("@@")


def rule_kind(line: str) -> str:
    """
    Classify a raw line for parsing statistics.

    Returns one of "ignored", "cosmetic", "exception" or "network".
    """
    result = clean_line(line)
    if result.discarded or result.line is None:
        return "ignored"
    if is_cosmetic_rule(result.line):
        return "cosmetic"
    if is_exception_rule(result.line):
        return "exception"
    return "network"


# =============================================================================
# CLEANING FUNCTIONS
# =============================================================================

def strip_trailing_comment(line: str) -> str:
    """
    Remove trailing inline comments.

    Only strips comments that are preceded by whitespace, to avoid
    stripping URL fragments or modifier values. Cosmetic rules are left
    alone since their selectors may legitimately contain " # ".

    Example:
        >>> strip_trailing_comment("||example.com^ # block ads")
        '||example.com^'
        >>> strip_trailing_comment("||example.com^#fragment")
        '||example.com^#fragment'
    """
    if is_cosmetic_rule(line):
        return line

    # Don't process lines that might have # in modifiers
    if "$" in line and "#" in line.split("$")[-1]:
        return line

    match = TRAILING_COMMENT_PATTERN.search(line)
    if match:
        return line[:match.start()].rstrip()
    return line


def clean_line(line: str) -> CleanResult:
    """
    Clean a single rule line.

    Example:
        >>> clean_line("  ||example.com^  ").line
        '||example.com^'
        >>> clean_line("! comment").reason
        'comment'
    """
    line = line.strip()

    if not line:
        return CleanResult(None, True, "empty")

    if is_comment(line):
        return CleanResult(None, True, "comment")

    line = strip_trailing_comment(line)

    if is_header(line):
        return CleanResult(None, True, "header")

    return CleanResult(line, False, None)


def clean_lines(lines: list[str]) -> list[str]:
    """Clean a list of lines, keeping only rules, in input order."""
    cleaned: list[str] = []
    for line in lines:
        result = clean_line(line)
        if not result.discarded:
            cleaned.append(result.line)  # type: ignore[arg-type]
    return cleaned


def sanitize(text: str) -> str:
    """
    Sanitize a block of rule text.

    Pure and idempotent: sanitize(sanitize(text)) == sanitize(text).

    Example:
        >>> sanitize("[Adblock Plus 2.0]\\n! Title\\n\\n||ads.example^ # ads\\n")
        '||ads.example^'
    """
    return "\n".join(clean_lines(text.splitlines()))
