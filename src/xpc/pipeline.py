import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from xpc.comments import CommentStripper
from xpc.declarations import DeclarationScanner
from xpc.diag import (
    ALLOCATION_FAILURE,
    INVALID_IDENTIFIER,
    IO_FAILURE,
    Diagnostic,
    PipelineError,
    warning,
)
from xpc.includes import IncludeResolver, split_lines
from xpc.loader import ENCODING, ERRORS, SourceText, count_lines, encoded_size, load_source
from xpc.options import PipelineOptions, normalize_options
from xpc.stats import IncludeRecord, ProcessingStats


@dataclass(frozen=True)
class PipelineResult:
    filename: str
    resolved_source: str
    stripped_source: str
    output: str
    stats: ProcessingStats
    diagnostics: tuple[Diagnostic, ...]
    include_trace: tuple[str, ...]


def read_source(path: str, *, stdin: TextIO | None = None) -> SourceText:
    if path == "-":
        stream = sys.stdin if stdin is None else stdin
        text = stream.read()
        return SourceText("<stdin>", text, encoded_size(text), count_lines(text))
    return load_source(path)


def squeeze_comment_lines(original: str, stripped: str) -> str:
    """Drop lines that are blank only because their comments were removed."""
    kept: list[str] = []
    for before, after in zip(split_lines(original), split_lines(stripped)):
        if not after.strip() and before.strip():
            continue
        kept.append(after + "\n")
    return "".join(kept)


def process_source(source: SourceText, *, options: PipelineOptions | None = None) -> PipelineResult:
    normalized_options = normalize_options(options)
    stats = ProcessingStats()
    stats.set_input_file(IncludeRecord(source.filename, source.size_bytes, source.line_count))
    try:
        resolver = IncludeResolver(
            stats,
            base_dir=normalized_options.base_dir,
            max_depth=normalized_options.max_include_depth,
        )
        resolved = resolver.resolve(source)
        resolved_source = resolved.as_source()
        stats.set_input(resolved_source.size_bytes, resolved_source.line_count)

        stripper = CommentStripper(stats, line_map=resolved.line_map)
        stripped = stripper.strip(resolved_source)

        scanner = DeclarationScanner(stats, filename=source.filename, line_map=resolved.line_map)
        scanner.scan(stripped.text)

        if normalized_options.squeeze_comment_lines:
            output = squeeze_comment_lines(resolved.text, stripped.text)
        else:
            output = stripped.text
    except MemoryError as error:
        raise PipelineError(
            Diagnostic("pipeline", source.filename, "Out of memory", code=ALLOCATION_FAILURE)
        ) from error
    stats.finalize(encoded_size(output), count_lines(output))
    findings = tuple(
        warning(
            "identifier",
            finding.file,
            f"Invalid identifier '{finding.name}'",
            line=finding.line,
            code=INVALID_IDENTIFIER,
        )
        for finding in stats.findings
    )
    return PipelineResult(
        source.filename,
        resolved.text,
        stripped.text,
        output,
        stats,
        (*resolver.warnings, *stripper.warnings, *findings),
        tuple(resolver.include_trace),
    )


def process_path(
    path: str | Path,
    *,
    options: PipelineOptions | None = None,
    stdin: TextIO | None = None,
) -> PipelineResult:
    return process_source(read_source(str(path), stdin=stdin), options=options)


def write_output(text: str, path: str | None = None, *, stdout: TextIO | None = None) -> None:
    if path is None:
        stream = sys.stdout if stdout is None else stdout
        buffer = getattr(stream, "buffer", None)
        if buffer is None:
            stream.write(text)
            return
        # Lone surrogates from undecodable input bytes go back out as the original bytes.
        stream.flush()
        buffer.write(text.encode(ENCODING, ERRORS))
        buffer.flush()
        return
    try:
        with open(path, "w", encoding=ENCODING, errors=ERRORS, newline="") as handle:
            handle.write(text)
    except OSError as error:
        raise PipelineError(
            Diagnostic("output", path, f"Cannot write output: {error}", code=IO_FAILURE)
        ) from error
