"""Repository file discovery with ignore rules."""

import os
from pathlib import Path
from typing import Iterable, Iterator, Optional

import pathspec

from ..utils.progress import log_warning

SUPPORTED_EXTENSIONS = frozenset({
    ".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".cpp", ".c", ".h", ".cs",
    ".php", ".rb", ".go", ".rs", ".swift", ".kt", ".scala", ".md", ".txt",
    ".json", ".yaml", ".yml", ".xml", ".html", ".css", ".sql", ".sh", ".bat",
    ".dockerfile", ".tf",
})

# Extensions that get structural (function/class/route) extraction
CODE_EXTENSIONS = frozenset({
    ".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".cpp", ".c", ".h", ".cs",
    ".php", ".rb", ".go", ".rs",
})

IGNORED_DIRECTORIES = frozenset({
    "node_modules", ".git", ".svn", ".hg", "dist", "build", "target", ".next",
    ".nuxt", "coverage", ".nyc_output", "logs", "tmp", "temp",
})

DEFAULT_IGNORE_PATTERNS = (
    "node_modules/**",
    ".git/**",
    "dist/**",
    "build/**",
    "coverage/**",
    "*.log",
    ".env*",
    "*.min.js",
    "*.bundle.js",
)

FILE_TYPES = {
    ".js": "javascript",
    ".ts": "typescript",
    ".jsx": "react",
    ".tsx": "react-typescript",
    ".py": "python",
    ".java": "java",
    ".cpp": "cpp",
    ".c": "c",
    ".h": "c-header",
    ".cs": "csharp",
    ".php": "php",
    ".rb": "ruby",
    ".go": "go",
    ".rs": "rust",
    ".md": "markdown",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}


def get_file_type(path: str | Path) -> str:
    """Map a file name to its language/category tag ("unknown" if unmapped)."""
    return FILE_TYPES.get(Path(path).suffix.lower(), "unknown")


def load_ignore_spec(root: Path, extra_patterns: Optional[Iterable[str]] = None) -> pathspec.PathSpec:
    """Build the ignore spec for a repository.

    Defaults are merged with the repository's own ``.gitignore`` (when it
    exists and is readable) and any caller-supplied patterns.
    """
    patterns = list(DEFAULT_IGNORE_PATTERNS)
    gitignore = root / ".gitignore"
    if gitignore.is_file():
        try:
            patterns.extend(gitignore.read_text(encoding="utf-8").splitlines())
        except (OSError, UnicodeDecodeError) as e:
            log_warning(f"Could not read {gitignore}: {e}")
    if extra_patterns:
        patterns.extend(extra_patterns)
    return pathspec.PathSpec.from_lines("gitwildmatch", patterns)


class RepositoryWalker:
    """Depth-first walk over the supported, non-ignored files of a repository.

    Entries are visited in name order so repeated walks over an unchanged tree
    yield the same sequence.
    """

    def __init__(self, root: Path, ignore_patterns: Optional[Iterable[str]] = None):
        self.root = Path(root)
        self.spec = load_ignore_spec(self.root, ignore_patterns)

    def is_ignored(self, relative_path: str, is_dir: bool = False) -> bool:
        if is_dir:
            return self.spec.match_file(relative_path + "/")
        return self.spec.match_file(relative_path)

    def walk(self) -> Iterator[Path]:
        """Yield absolute paths of files to extract."""
        yield from self._walk_dir(self.root)

    def _walk_dir(self, directory: Path) -> Iterator[Path]:
        try:
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError as e:
            log_warning(f"Cannot read directory {directory}: {e}")
            return

        for entry in entries:
            path = Path(entry.path)
            relative = path.relative_to(self.root).as_posix()

            if entry.is_dir(follow_symlinks=False):
                if entry.name in IGNORED_DIRECTORIES or self.is_ignored(relative, is_dir=True):
                    continue
                yield from self._walk_dir(path)
            elif entry.is_file():
                if self.is_ignored(relative):
                    continue
                if path.suffix.lower() in SUPPORTED_EXTENSIONS:
                    yield path
