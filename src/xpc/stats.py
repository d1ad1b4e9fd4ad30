from dataclasses import dataclass, field
from typing import Literal

Counter = Literal[
    "identifiers_checked",
    "invalid_identifiers",
    "comments_removed",
    "includes_processed",
]

UNREADABLE = -1


@dataclass(frozen=True)
class IncludeRecord:
    name: str
    size_bytes: int
    line_count: int

    @classmethod
    def unreadable(cls, name: str) -> "IncludeRecord":
        return cls(name, UNREADABLE, UNREADABLE)

    @property
    def readable(self) -> bool:
        return self.size_bytes >= 0 and self.line_count >= 0


@dataclass(frozen=True)
class IdentifierFinding:
    file: str
    line: int
    name: str


@dataclass
class ProcessingStats:
    identifiers_checked: int = 0
    invalid_identifiers: int = 0
    comments_removed: int = 0
    includes_processed: int = 0
    input_file: IncludeRecord | None = None
    input_size: int = 0
    input_lines: int = 0
    output_size: int = 0
    output_lines: int = 0
    includes: list[IncludeRecord] = field(default_factory=list)
    findings: list[IdentifierFinding] = field(default_factory=list)

    def increment(self, counter: Counter, amount: int = 1) -> None:
        if counter not in {
            "identifiers_checked",
            "invalid_identifiers",
            "comments_removed",
            "includes_processed",
        }:
            raise ValueError(f"Unknown counter: {counter}")
        setattr(self, counter, getattr(self, counter) + amount)

    def record_include(self, record: IncludeRecord) -> None:
        self.includes.append(record)
        self.includes_processed += 1

    def record_finding(self, finding: IdentifierFinding) -> None:
        self.findings.append(finding)
        self.invalid_identifiers += 1

    def set_input_file(self, record: IncludeRecord) -> None:
        self.input_file = record

    def set_input(self, size: int, lines: int) -> None:
        self.input_size = size
        self.input_lines = lines

    def finalize(self, output_size: int, output_lines: int) -> None:
        self.output_size = output_size
        self.output_lines = output_lines


def _format_record(record: IncludeRecord) -> str:
    if not record.readable:
        return f"'{record.name}' (unreadable)"
    return f"'{record.name}', {record.size_bytes} bytes, {record.line_count} lines"


def format_stats(stats: ProcessingStats) -> list[str]:
    lines = ["Processing statistics:"]
    if stats.input_file is not None:
        lines.append(f"  Input file: {_format_record(stats.input_file)}")
    lines.append(f"  Files included: {stats.includes_processed}")
    for record in stats.includes:
        lines.append(f"    - {_format_record(record)}")
    lines.append(f"  Input after includes: {stats.input_size} bytes, {stats.input_lines} lines")
    lines.append(f"  Identifiers checked: {stats.identifiers_checked}")
    lines.append(f"  Invalid identifiers: {stats.invalid_identifiers}")
    for finding in stats.findings:
        lines.append(f"    - {finding.file}:{finding.line}: '{finding.name}'")
    lines.append(f"  Comments removed: {stats.comments_removed}")
    lines.append(f"  Output: {stats.output_size} bytes, {stats.output_lines} lines")
    return lines


def stats_to_dict(stats: ProcessingStats) -> dict[str, object]:
    def record_dict(record: IncludeRecord) -> dict[str, object]:
        return {"name": record.name, "size": record.size_bytes, "lines": record.line_count}

    return {
        "input_file": None if stats.input_file is None else record_dict(stats.input_file),
        "includes_processed": stats.includes_processed,
        "includes": [record_dict(record) for record in stats.includes],
        "input_size": stats.input_size,
        "input_lines": stats.input_lines,
        "identifiers_checked": stats.identifiers_checked,
        "invalid_identifiers": stats.invalid_identifiers,
        "findings": [
            {"file": finding.file, "line": finding.line, "name": finding.name}
            for finding in stats.findings
        ],
        "comments_removed": stats.comments_removed,
        "output_size": stats.output_size,
        "output_lines": stats.output_lines,
    }
