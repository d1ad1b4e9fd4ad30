from dataclasses import dataclass
from enum import Enum, auto

from xpc.diag import UNTERMINATED_COMMENT, Diagnostic, warning
from xpc.includes import LineMap, map_location
from xpc.loader import SourceText, source_from_text
from xpc.stats import ProcessingStats


class CommentState(Enum):
    CODE = auto()
    SAW_SLASH = auto()
    LINE_COMMENT = auto()
    BLOCK_COMMENT = auto()
    BLOCK_COMMENT_STAR = auto()
    IN_STRING = auto()
    IN_CHAR = auto()


_OPEN_BLOCK_STATES = frozenset({CommentState.BLOCK_COMMENT, CommentState.BLOCK_COMMENT_STAR})


@dataclass(frozen=True)
class StrippedText:
    filename: str
    text: str
    comments_removed: int
    unterminated_line: int | None = None

    def as_source(self) -> SourceText:
        return source_from_text(self.text, filename=self.filename)


class _StripRun:
    def __init__(self, source: str) -> None:
        self._source = source
        self._index = 0
        self._line = 1
        self._out: list[str] = []
        self.state = CommentState.CODE
        self.comments = 0
        self.block_start_line: int | None = None

    def run(self) -> str:
        while not self._eof():
            ch = self._advance()
            if self.state is CommentState.CODE:
                self._code(ch)
            elif self.state is CommentState.SAW_SLASH:
                self._saw_slash(ch)
            elif self.state is CommentState.LINE_COMMENT:
                if ch == "\n":
                    self._emit(ch)
                    self.state = CommentState.CODE
            elif self.state is CommentState.BLOCK_COMMENT:
                self._block_comment(ch)
            elif self.state is CommentState.BLOCK_COMMENT_STAR:
                self._block_comment_star(ch)
            else:
                self._literal(ch, '"' if self.state is CommentState.IN_STRING else "'")
        if self.state is CommentState.SAW_SLASH:
            self._emit("/")
            self.state = CommentState.CODE
        return "".join(self._out)

    def _eof(self) -> bool:
        return self._index >= len(self._source)

    def _advance(self) -> str:
        ch = self._source[self._index]
        self._index += 1
        return ch

    def _emit(self, ch: str) -> None:
        self._out.append(ch)
        if ch == "\n":
            self._line += 1

    def _code(self, ch: str) -> None:
        if ch == "/":
            self.state = CommentState.SAW_SLASH
            return
        self._emit(ch)
        if ch == '"':
            self.state = CommentState.IN_STRING
        elif ch == "'":
            self.state = CommentState.IN_CHAR

    def _saw_slash(self, ch: str) -> None:
        if ch == "/":
            self.state = CommentState.LINE_COMMENT
            self.comments += 1
        elif ch == "*":
            self.state = CommentState.BLOCK_COMMENT
            self.comments += 1
            self.block_start_line = self._line
        else:
            # Division operator: release the held slash and re-read ch as code.
            self._emit("/")
            self.state = CommentState.CODE
            self._code(ch)

    def _block_comment(self, ch: str) -> None:
        if ch == "\n":
            self._emit(ch)
        elif ch == "*":
            self.state = CommentState.BLOCK_COMMENT_STAR

    def _block_comment_star(self, ch: str) -> None:
        if ch == "/":
            self.state = CommentState.CODE
        elif ch != "*":
            self.state = CommentState.BLOCK_COMMENT
            if ch == "\n":
                self._emit(ch)

    def _literal(self, ch: str, quote: str) -> None:
        self._emit(ch)
        if ch == "\\":
            if not self._eof():
                self._emit(self._advance())
        elif ch == quote:
            self.state = CommentState.CODE


class CommentStripper:
    """Removes ``//`` and ``/* */`` comments without touching literals.

    Newlines inside comments are kept, so the stripped text has the same line
    structure as its input. ``comments_removed`` counts comment openings.
    """

    def __init__(self, stats: ProcessingStats, *, line_map: LineMap = ()) -> None:
        self._stats = stats
        self._line_map = line_map
        self.warnings: list[Diagnostic] = []

    def strip(self, source: SourceText) -> StrippedText:
        run = _StripRun(source.text)
        text = run.run()
        self._stats.increment("comments_removed", run.comments)
        unterminated_line = None
        if run.state in _OPEN_BLOCK_STATES:
            unterminated_line = run.block_start_line
            filename, line = map_location(
                self._line_map, source.filename, unterminated_line or 1
            )
            self.warnings.append(
                warning(
                    "comment",
                    filename,
                    "Unterminated /* comment at end of input",
                    line=line,
                    code=UNTERMINATED_COMMENT,
                )
            )
        return StrippedText(source.filename, text, run.comments, unterminated_line)


def strip_comments(text: str, stats: ProcessingStats | None = None) -> str:
    stripper = CommentStripper(ProcessingStats() if stats is None else stats)
    return stripper.strip(source_from_text(text)).text
