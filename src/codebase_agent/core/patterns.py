"""Heuristic line patterns used for structural chunk extraction.

These regular expressions recognize declaration-looking lines in a handful of
C-family languages and Python. They are best-effort only: there is no real
parser behind them, and a line that merely looks like a declaration will
start a new chunk. Extend ``PATTERN_TABLE`` to teach the extractor about more
syntax; families are tried in table order and the first match wins.
"""

import re
from dataclasses import dataclass
from typing import Optional

from ..models.chunk import ChunkType


@dataclass(frozen=True)
class PatternFamily:
    """A group of alternative patterns that all start the same chunk type."""

    chunk_type: ChunkType
    patterns: tuple[re.Pattern, ...]

    def matches(self, line: str) -> bool:
        return any(pattern.search(line) for pattern in self.patterns)


FUNCTION_PATTERNS = (
    re.compile(
        r"^\s*(function\s+\w+|const\s+\w+\s*=\s*\([^)]*\)\s*=>|def\s+\w+|public\s+\w+\s+\w+\s*\()"
    ),
    re.compile(r"^\s*(async\s+function\s+\w+|export\s+(async\s+)?function\s+\w+)"),
    re.compile(r"^\s*(\w+\s*:\s*function|\w+\s*:\s*\([^)]*\)\s*=>)"),
)

CLASS_PATTERNS = (
    re.compile(r"^\s*(class\s+\w+|interface\s+\w+|type\s+\w+)"),
    re.compile(r"^\s*(export\s+(default\s+)?class\s+\w+)"),
)

ROUTE_PATTERNS = (
    re.compile(r"^\s*(app\.(get|post|put|delete|patch)|router\.(get|post|put|delete|patch))"),
    re.compile(r"^\s*@(Get|Post|Put|Delete|Patch)\s*\("),
)

PATTERN_TABLE: tuple[PatternFamily, ...] = (
    PatternFamily(ChunkType.FUNCTION, FUNCTION_PATTERNS),
    PatternFamily(ChunkType.CLASS, CLASS_PATTERNS),
    PatternFamily(ChunkType.ROUTE, ROUTE_PATTERNS),
)

FUNCTION_NAME_PATTERNS = (
    re.compile(r"function\s+(\w+)"),
    re.compile(r"const\s+(\w+)\s*="),
    re.compile(r"def\s+(\w+)"),
    re.compile(r"(\w+)\s*:\s*function"),
    re.compile(r"(\w+)\s*:\s*\([^)]*\)\s*=>"),
)

CLASS_NAME_PATTERN = re.compile(r"class\s+(\w+)|interface\s+(\w+)")

IMPORT_PATTERN = re.compile(r"^(import|require|from|#include|using)")
PREAMBLE_PATTERN = re.compile(r"^(import|require|from|package)")
COMMENT_PREFIXES = ("//", "/*", "#", '"""')
MARKDOWN_HEADER_PATTERN = re.compile(r"^(#{1,6})\s+(.+)")


def match_chunk_type(line: str) -> Optional[ChunkType]:
    """Return the chunk type started by ``line``, or None."""
    for family in PATTERN_TABLE:
        if family.matches(line):
            return family.chunk_type
    return None


def extract_function_name(line: str) -> Optional[str]:
    """Pull a declared function name out of a declaration line."""
    for pattern in FUNCTION_NAME_PATTERNS:
        match = pattern.search(line)
        if match:
            return match.group(1)
    return None


def extract_class_name(line: str) -> Optional[str]:
    """Pull a declared class or interface name out of a declaration line."""
    match = CLASS_NAME_PATTERN.search(line)
    if match:
        return match.group(1) or match.group(2)
    return None


def is_comment_line(stripped: str) -> bool:
    return stripped.startswith(COMMENT_PREFIXES)
