from dataclasses import dataclass
from pathlib import Path

from xpc.diag import IO_FAILURE, NOT_FOUND, Diagnostic, PipelineError

ENCODING = "utf-8"
ERRORS = "surrogateescape"

_NOT_FOUND_ERRORS = (FileNotFoundError, IsADirectoryError, NotADirectoryError, PermissionError)


@dataclass(frozen=True)
class SourceText:
    filename: str
    text: str
    size_bytes: int
    line_count: int


def count_lines(text: str) -> int:
    """Count ``\\n`` terminators, plus one for a trailing unterminated line."""
    lines = text.count("\n")
    if text and not text.endswith("\n"):
        lines += 1
    return lines


def encoded_size(text: str) -> int:
    return len(text.encode(ENCODING, ERRORS))


def source_from_text(text: str, *, filename: str = "<input>") -> SourceText:
    return SourceText(filename, text, encoded_size(text), count_lines(text))


def load_source(path: str | Path, *, stage: str = "load") -> SourceText:
    filename = str(path)
    try:
        with open(path, "rb") as stream:
            data = stream.read()
    except _NOT_FOUND_ERRORS as error:
        raise PipelineError(
            Diagnostic(stage, filename, f"Cannot open file: {error.strerror}", code=NOT_FOUND)
        ) from error
    except OSError as error:
        raise PipelineError(
            Diagnostic(stage, filename, f"Cannot read file: {error}", code=IO_FAILURE)
        ) from error
    text = data.decode(ENCODING, ERRORS)
    return SourceText(filename, text, len(data), count_lines(text))
