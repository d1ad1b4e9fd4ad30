from dataclasses import dataclass
from typing import Literal

DiagFormat = Literal["human", "json"]

MAX_INCLUDE_DEPTH = 10


@dataclass(frozen=True)
class PipelineOptions:
    base_dir: str | None = None
    max_include_depth: int = MAX_INCLUDE_DEPTH
    squeeze_comment_lines: bool = False
    diag_format: DiagFormat = "human"

    def __post_init__(self) -> None:
        if self.diag_format not in {"human", "json"}:
            raise ValueError(f"Unsupported diagnostic format: {self.diag_format}")
        if self.max_include_depth < 0:
            raise ValueError(f"Invalid include depth limit: {self.max_include_depth}")


def normalize_options(options: PipelineOptions | None) -> PipelineOptions:
    return PipelineOptions() if options is None else options
