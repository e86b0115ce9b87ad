"""Split repository files into typed chunks."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from ..models.chunk import Chunk, ChunkType
from ..utils.progress import log_info, log_warning
from . import patterns
from .walker import CODE_EXTENSIONS, RepositoryWalker, get_file_type

MIN_CHUNK_CHARS = 100
OVERVIEW_PREVIEW_LINES = 30
OVERVIEW_COMMENT_SCAN_LINES = 20
OVERVIEW_MAX_IMPORTS = 10


@dataclass
class ExtractionResult:
    """Outcome of extracting a whole repository."""

    chunks: List[Chunk] = field(default_factory=list)
    processed_files: int = 0
    skipped_files: int = 0


@dataclass
class _OpenChunk:
    """Mutable accumulator for the chunk currently being built."""

    type: ChunkType
    start_line: int
    function_name: Optional[str] = None
    class_name: Optional[str] = None
    lines: List[str] = field(default_factory=list)

    @property
    def content(self) -> str:
        return "\n".join(self.lines)


class ChunkExtractor:
    """Turns file contents into overview, structural, documentation and
    configuration chunks.

    Extraction is pure with respect to the file tree: the same files and
    ignore rules always give the same chunks in the same order.
    """

    def extract_repository(
        self,
        root: Path,
        repository: str,
        branch: str = "main",
        ignore_patterns: Optional[Iterable[str]] = None,
    ) -> ExtractionResult:
        """Extract chunks from every supported, non-ignored file under root.

        Args:
            root: Repository checkout directory
            repository: Name the chunks are tagged with
            branch: Branch the chunks are tagged with
            ignore_patterns: Extra gitignore-style patterns

        Returns:
            ExtractionResult with chunks and processed/skipped file counts
        """
        root = Path(root)
        result = ExtractionResult()
        walker = RepositoryWalker(root, ignore_patterns)

        for path in walker.walk():
            chunks = self.extract_file(path, root, repository, branch)
            if chunks:
                result.chunks.extend(chunks)
                result.processed_files += 1
            else:
                result.skipped_files += 1

        log_info(
            f"Extracted {len(result.chunks)} chunks from {result.processed_files} files "
            f"({result.skipped_files} skipped)"
        )
        return result

    def extract_file(self, path: Path, root: Path, repository: str, branch: str = "main") -> List[Chunk]:
        """Extract all chunks for one file.

        Any read or decode error yields an empty list; callers never see a
        partial chunk set for a file.
        """
        path = Path(path)
        relative_path = path.relative_to(root).as_posix()
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log_warning(f"Error processing file {relative_path}: {e}")
            return []

        builder = _FileChunkBuilder(relative_path, get_file_type(path), repository, branch)
        extension = path.suffix.lower()

        chunks = [builder.overview(content)]
        if extension in CODE_EXTENSIONS:
            chunks.extend(builder.code_chunks(content))
        elif extension == ".md":
            chunks.extend(builder.markdown_chunks(content))
        elif extension == ".json":
            chunks.extend(builder.json_chunks(content))
        return chunks


class _FileChunkBuilder:
    def __init__(self, file_path: str, file_type: str, repository: str, branch: str):
        self.file_path = file_path
        self.file_name = Path(file_path).name
        self.file_type = file_type
        self.repository = repository
        self.branch = branch

    def _make(self, chunk_type: ChunkType, content: str, start_line: int, end_line: int, **extra) -> Chunk:
        return Chunk(
            type=chunk_type,
            content=content,
            file_path=self.file_path,
            file_name=self.file_name,
            file_type=self.file_type,
            repository=self.repository,
            branch=self.branch,
            start_line=start_line,
            end_line=end_line,
            **extra,
        )

    def overview(self, content: str) -> Chunk:
        lines = content.splitlines()
        # An empty file counts as one empty line
        total = max(len(lines), 1)

        imports = [
            line.strip() for line in lines if patterns.IMPORT_PATTERN.match(line.strip())
        ][:OVERVIEW_MAX_IMPORTS]

        comments = []
        for line in lines[:OVERVIEW_COMMENT_SCAN_LINES]:
            stripped = line.strip()
            if patterns.is_comment_line(stripped):
                comments.append(stripped)
            elif stripped and not patterns.PREAMBLE_PATTERN.match(stripped):
                break

        parts = [f"File: {self.file_path}", f"Total Lines: {total}", ""]
        if comments:
            parts.append("Comments:")
            parts.extend(comments)
            parts.append("")
        if imports:
            parts.append("Imports/Dependencies:")
            parts.extend(imports)
            parts.append("")
        parts.append("Preview:")
        parts.extend(lines[:OVERVIEW_PREVIEW_LINES])

        return self._make(
            ChunkType.FILE_OVERVIEW,
            "\n".join(parts),
            1,
            total,
            description=f"Overview of {self.file_name}",
        )

    def code_chunks(self, content: str) -> List[Chunk]:
        chunks: List[Chunk] = []
        current: Optional[_OpenChunk] = None
        brace_count = 0
        in_block_comment = False

        def flush(end_line: int) -> None:
            if current is not None and current.content.strip():
                chunks.append(
                    self._make(
                        current.type,
                        current.content,
                        current.start_line,
                        max(end_line, current.start_line),
                        function_name=current.function_name,
                        class_name=current.class_name,
                    )
                )

        lines = content.splitlines()
        for line_number, line in enumerate(lines, start=1):
            stripped = line.strip()

            # A line that closes its comment is still scanned for patterns and braces
            if "/*" in stripped:
                in_block_comment = True
            if "*/" in stripped:
                in_block_comment = False
            if in_block_comment:
                if current is not None:
                    current.lines.append(line)
                continue

            if not stripped or stripped.startswith(("//", "#")):
                if current is not None:
                    current.lines.append(line)
                continue

            chunk_type = patterns.match_chunk_type(line)
            if chunk_type is not None:
                flush(line_number - 1)
                current = _OpenChunk(
                    type=chunk_type,
                    start_line=line_number,
                    function_name=patterns.extract_function_name(line),
                    class_name=patterns.extract_class_name(line) if chunk_type == ChunkType.CLASS else None,
                )
                brace_count = 0

            if current is not None:
                current.lines.append(line)
                brace_count += line.count("{") - line.count("}")
                if brace_count <= 0 and len(current.content) > MIN_CHUNK_CHARS:
                    flush(line_number)
                    current = None

        if current is not None:
            flush(len(lines))
        return chunks

    def markdown_chunks(self, content: str) -> List[Chunk]:
        chunks: List[Chunk] = []
        title: Optional[str] = None
        section: List[str] = []
        start_line = 1

        def flush(end_line: int) -> None:
            body = "\n".join(section)
            if title is not None and body.strip():
                chunks.append(
                    self._make(
                        ChunkType.DOCUMENTATION,
                        body,
                        start_line,
                        max(end_line, start_line),
                        description=title,
                    )
                )

        lines = content.splitlines()
        for line_number, line in enumerate(lines, start=1):
            match = patterns.MARKDOWN_HEADER_PATTERN.match(line)
            if match:
                flush(line_number - 1)
                title = match.group(2).strip()
                section = [line]
                start_line = line_number
            elif title is not None:
                section.append(line)

        flush(len(lines))
        return chunks

    def json_chunks(self, content: str) -> List[Chunk]:
        try:
            document = json.loads(content)
        except ValueError:
            # Malformed configuration is skipped without a warning
            return []
        return [
            self._make(
                ChunkType.CONFIGURATION,
                json.dumps(document, indent=2),
                1,
                max(len(content.splitlines()), 1),
                description=f"Configuration file: {self.file_name}",
            )
        ]
