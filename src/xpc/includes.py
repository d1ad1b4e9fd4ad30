from dataclasses import dataclass, replace
from pathlib import Path

from xpc.diag import (
    INCLUDE_UNREADABLE,
    MALFORMED_DIRECTIVE,
    TOO_DEEP,
    Diagnostic,
    PipelineError,
    warning,
)
from xpc.loader import SourceText, load_source, source_from_text
from xpc.options import MAX_INCLUDE_DEPTH
from xpc.stats import IncludeRecord, ProcessingStats

_DIRECTIVE = "#include"
_STAGE = "include"

LineMap = tuple[tuple[str, int], ...]


@dataclass(frozen=True)
class ResolvedText:
    filename: str
    text: str
    line_map: LineMap

    def as_source(self) -> SourceText:
        return source_from_text(self.text, filename=self.filename)


@dataclass(frozen=True)
class _SourceLocation:
    filename: str
    line: int


@dataclass(frozen=True)
class _IncludeDirective:
    name: str
    is_angled: bool = False
    error: str | None = None


class _OutputBuilder:
    def __init__(self) -> None:
        self._chunks: list[str] = []
        self._line_map: list[tuple[str, int]] = []

    def append_line(self, text: str, location: _SourceLocation) -> None:
        self._chunks.append(text + "\n")
        self._line_map.append((location.filename, location.line))

    def extend_resolved(self, resolved: ResolvedText) -> None:
        self._chunks.append(resolved.text)
        self._line_map.extend(resolved.line_map)

    def build(self, filename: str) -> ResolvedText:
        return ResolvedText(filename, "".join(self._chunks), tuple(self._line_map))


def map_location(line_map: LineMap, filename: str, line: int) -> tuple[str, int]:
    if 1 <= line <= len(line_map):
        return line_map[line - 1]
    return filename, line


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, dropping the terminators and any trailing ``\\r``."""
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _parse_include_line(line: str) -> _IncludeDirective | None:
    stripped = line.lstrip()
    if not stripped.startswith(_DIRECTIVE):
        return None
    body = stripped[len(_DIRECTIVE) :]
    first_quote = body.find('"')
    if first_quote != -1:
        second_quote = body.find('"', first_quote + 1)
        if second_quote == -1:
            return _IncludeDirective("", error="missing closing '\"'")
        name = body[first_quote + 1 : second_quote]
        if not name:
            return _IncludeDirective("", error="empty file name")
        return _IncludeDirective(name)
    open_angle = body.find("<")
    close_angle = body.find(">", open_angle + 1) if open_angle != -1 else -1
    if close_angle > open_angle + 1:
        return _IncludeDirective(body[open_angle + 1 : close_angle], is_angled=True)
    return _IncludeDirective("", error='expected "name" or <name>')


def _format_include_trace(source: str, line: int, include_name: str, include_path: str) -> str:
    return f'{source}:{line}: #include "{include_name}" -> {include_path}'


class IncludeResolver:
    """Flattens quoted ``#include`` directives into a single text.

    Included files are looked up relative to ``base_dir`` (the working directory
    by default). Angle-bracket includes are copied through untouched. Every
    quoted include is recorded in ``stats``, including the ones that could not
    be read, which are reported as warnings instead of aborting the run.
    """

    def __init__(
        self,
        stats: ProcessingStats,
        *,
        base_dir: str | Path | None = None,
        max_depth: int = MAX_INCLUDE_DEPTH,
    ) -> None:
        self._stats = stats
        self._base_dir = Path.cwd() if base_dir is None else Path(base_dir)
        self._max_depth = max_depth
        self.include_trace: list[str] = []
        self.warnings: list[Diagnostic] = []

    def resolve(self, source: SourceText, depth: int = 0) -> ResolvedText:
        if depth > self._max_depth:
            raise PipelineError(
                Diagnostic(
                    _STAGE,
                    source.filename,
                    f"Include depth limit ({self._max_depth}) exceeded",
                    code=TOO_DEEP,
                )
            )
        return self._resolve(source, depth, (source.filename,))

    def _resolve(
        self,
        source: SourceText,
        depth: int,
        include_stack: tuple[str, ...],
    ) -> ResolvedText:
        out = _OutputBuilder()
        for index, line in enumerate(split_lines(source.text), start=1):
            location = _SourceLocation(source.filename, index)
            directive = _parse_include_line(line)
            if directive is None or directive.is_angled:
                out.append_line(line, location)
                continue
            if directive.error is not None:
                self.warnings.append(
                    warning(
                        _STAGE,
                        location.filename,
                        f"Malformed #include directive ({directive.error}); kept as code",
                        line=location.line,
                        code=MALFORMED_DIRECTIVE,
                    )
                )
                out.append_line(line, location)
                continue
            included = self._handle_include(directive.name, location, depth, include_stack)
            if included is not None:
                out.extend_resolved(included)
        return out.build(source.filename)

    def _handle_include(
        self,
        include_name: str,
        location: _SourceLocation,
        depth: int,
        include_stack: tuple[str, ...],
    ) -> ResolvedText | None:
        child_depth = depth + 1
        if child_depth > self._max_depth:
            chain = " -> ".join((*include_stack, include_name))
            raise PipelineError(
                Diagnostic(
                    _STAGE,
                    location.filename,
                    f"Include depth limit ({self._max_depth}) exceeded, "
                    f"probable include cycle: {chain}",
                    location.line,
                    TOO_DEEP,
                )
            )
        include_path = self._base_dir / include_name
        try:
            included = load_source(include_path, stage=_STAGE)
        except PipelineError as error:
            self.warnings.append(
                warning(
                    _STAGE,
                    location.filename,
                    f'Cannot include "{include_name}": {error.diagnostic.message}',
                    line=location.line,
                    code=INCLUDE_UNREADABLE,
                )
            )
            self._stats.record_include(IncludeRecord.unreadable(include_name))
            return None
        self._stats.record_include(
            IncludeRecord(include_name, included.size_bytes, included.line_count)
        )
        self.include_trace.append(
            _format_include_trace(location.filename, location.line, include_name, str(include_path))
        )
        return self._resolve(
            replace(included, filename=include_name),
            child_depth,
            (*include_stack, include_name),
        )
