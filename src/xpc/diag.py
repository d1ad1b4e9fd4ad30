from dataclasses import dataclass
from typing import Literal

Severity = Literal["error", "warning"]

NOT_FOUND = "XPC-IO-0101"
IO_FAILURE = "XPC-IO-0102"
TOO_DEEP = "XPC-INC-0201"
MALFORMED_DIRECTIVE = "XPC-INC-0202"
INCLUDE_UNREADABLE = "XPC-INC-0203"
ALLOCATION_FAILURE = "XPC-MEM-0301"
UNTERMINATED_COMMENT = "XPC-CMT-0401"
INVALID_IDENTIFIER = "XPC-ID-0501"


@dataclass(frozen=True)
class Diagnostic:
    stage: str
    filename: str
    message: str
    line: int | None = None
    code: str | None = None
    severity: Severity = "error"

    def __str__(self) -> str:
        suffix = f" [{self.code}]" if self.code is not None else ""
        if self.line is None:
            return f"{self.filename}: {self.stage}: {self.severity}: {self.message}{suffix}"
        return f"{self.filename}:{self.line}: {self.stage}: {self.severity}: {self.message}{suffix}"

    def to_dict(self) -> dict[str, object]:
        return {
            "stage": self.stage,
            "severity": self.severity,
            "filename": self.filename,
            "line": self.line,
            "code": self.code,
            "message": self.message,
        }


class PipelineError(ValueError):
    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(str(diagnostic))
        self.diagnostic = diagnostic

    @property
    def code(self) -> str | None:
        return self.diagnostic.code


def warning(
    stage: str,
    filename: str,
    message: str,
    *,
    line: int | None = None,
    code: str | None = None,
) -> Diagnostic:
    return Diagnostic(stage, filename, message, line, code, "warning")
