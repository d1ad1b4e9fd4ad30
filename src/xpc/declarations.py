import re
from enum import Enum, auto

from xpc.includes import LineMap, map_location, split_lines
from xpc.stats import IdentifierFinding, ProcessingStats

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_ENTRY_RE = re.compile(r"\bmain\b")
_DELIMITER_RE = re.compile(r"[ \t\v\f\r\n,;*()\[\]=]+")
_FIRST_WORD_RE = re.compile(r"[A-Za-z_]\w*")

# Statements opening with these words are code, never declarations.
STATEMENT_KEYWORDS = frozenset(
    {
        "break",
        "case",
        "continue",
        "default",
        "do",
        "else",
        "for",
        "goto",
        "if",
        "return",
        "switch",
        "while",
    }
)


class ScanState(Enum):
    PRE_ENTRY = auto()
    GLOBAL_DECL = auto()
    SEEK_ENTRY_BRACE = auto()
    ENTRY_LOCAL_DECL = auto()
    ENTRY_CODE = auto()
    POST_ENTRY = auto()


_BEFORE_ENTRY = frozenset({ScanState.PRE_ENTRY, ScanState.GLOBAL_DECL})
_INSIDE_ENTRY = frozenset({ScanState.ENTRY_LOCAL_DECL, ScanState.ENTRY_CODE})
_DECLARATION_STATES = frozenset({ScanState.GLOBAL_DECL, ScanState.ENTRY_LOCAL_DECL})


def is_valid_identifier(token: str) -> bool:
    return _IDENT_RE.fullmatch(token) is not None


def _is_entry_signature(line: str) -> bool:
    return "(" in line and _ENTRY_RE.search(line) is not None


def split_statements(text: str) -> list[str]:
    """Split ``text`` after every ``;``; a trailing piece keeps no terminator."""
    parts = text.split(";")
    statements = [part + ";" for part in parts[:-1]]
    statements.append(parts[-1])
    return [statement.strip() for statement in statements if statement.strip()]


def is_declaration_candidate(statement: str) -> bool:
    if not statement.endswith(";"):
        return False
    first_word = _FIRST_WORD_RE.match(statement)
    return first_word is None or first_word.group(0) not in STATEMENT_KEYWORDS


def declaration_names(statement: str) -> list[str]:
    """Tokens of a declaration after the leading type token."""
    tokens = [token for token in _DELIMITER_RE.split(statement) if token]
    return tokens[1:]


class DeclarationScanner:
    """Heuristic scan of declarations before and at the top of ``main``.

    The scanner walks lines through a fixed sequence of phases: global
    declarations, the ``main(`` signature, its opening brace, the contiguous
    block of local declarations, then the body. Each ``;``-terminated statement
    seen in a declaration phase has its names checked with
    :func:`is_valid_identifier`. Analysis stops for good at the first statement
    starting with ``}`` inside ``main``.
    """

    def __init__(
        self,
        stats: ProcessingStats,
        *,
        filename: str = "<input>",
        line_map: LineMap = (),
    ) -> None:
        self._stats = stats
        self._filename = filename
        self._line_map = line_map
        self.state = ScanState.PRE_ENTRY

    def scan(self, text: str) -> None:
        for line_number, line in enumerate(split_lines(text), start=1):
            self.scan_line(line, line_number)

    def scan_line(self, line: str, line_number: int) -> None:
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#") or self.state is ScanState.POST_ENTRY:
            return
        if self.state in _BEFORE_ENTRY:
            if _is_entry_signature(trimmed):
                self.state = ScanState.SEEK_ENTRY_BRACE
                brace = trimmed.find("{")
                if brace != -1:
                    self._enter_body(trimmed[brace + 1 :], line_number)
                return
            self.state = ScanState.GLOBAL_DECL
        elif self.state is ScanState.SEEK_ENTRY_BRACE:
            if trimmed.startswith("{"):
                self._enter_body(trimmed[1:], line_number)
            return
        self._scan_statements(trimmed, line_number)

    def _enter_body(self, rest: str, line_number: int) -> None:
        self.state = ScanState.ENTRY_LOCAL_DECL
        self._scan_statements(rest, line_number)

    def _scan_statements(self, text: str, line_number: int) -> None:
        for statement in split_statements(text):
            if statement.startswith("}"):
                if self.state in _INSIDE_ENTRY:
                    self.state = ScanState.POST_ENTRY
                    return
                continue
            if self.state not in _DECLARATION_STATES:
                continue
            if is_declaration_candidate(statement):
                self._check_declaration(statement, line_number)
            elif self.state is ScanState.ENTRY_LOCAL_DECL:
                self.state = ScanState.ENTRY_CODE

    def _check_declaration(self, statement: str, line_number: int) -> None:
        for name in declaration_names(statement):
            self._stats.increment("identifiers_checked")
            if is_valid_identifier(name):
                continue
            filename, line = map_location(self._line_map, self._filename, line_number)
            self._stats.record_finding(IdentifierFinding(filename, line, name))
