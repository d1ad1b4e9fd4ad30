import unittest

from tests import _bootstrap  # noqa: F401
from xpc.declarations import (
    DeclarationScanner,
    ScanState,
    declaration_names,
    is_declaration_candidate,
    is_valid_identifier,
    split_statements,
)
from xpc.stats import IdentifierFinding, ProcessingStats


class IdentifierValidatorTests(unittest.TestCase):
    def test_examples(self) -> None:
        self.assertTrue(is_valid_identifier("x_1"))
        self.assertTrue(is_valid_identifier("_ok"))
        self.assertFalse(is_valid_identifier("1x"))
        self.assertFalse(is_valid_identifier(""))
        self.assertFalse(is_valid_identifier("bad-name"))

    def test_ascii_only_and_no_keyword_check(self) -> None:
        self.assertFalse(is_valid_identifier("café"))
        self.assertFalse(is_valid_identifier("x\n"))
        self.assertTrue(is_valid_identifier("int"))


class StatementHelperTests(unittest.TestCase):
    def test_split_statements(self) -> None:
        self.assertEqual(
            split_statements("int z;int 3w;return 0;}"),
            ["int z;", "int 3w;", "return 0;", "}"],
        )
        self.assertEqual(split_statements("  "), [])
        self.assertEqual(split_statements("foo()"), ["foo()"])

    def test_declaration_candidates(self) -> None:
        self.assertTrue(is_declaration_candidate("int x;"))
        self.assertFalse(is_declaration_candidate("int x"))
        self.assertFalse(is_declaration_candidate("return 0;"))
        self.assertFalse(is_declaration_candidate("break;"))

    def test_declaration_names_skip_type(self) -> None:
        self.assertEqual(declaration_names("int *p, q;"), ["p", "q"])
        self.assertEqual(declaration_names("char buf[SIZE];"), ["buf", "SIZE"])
        self.assertEqual(declaration_names("int x-ray;"), ["x-ray"])
        self.assertEqual(declaration_names("int count = 0;"), ["count", "0"])


class DeclarationScannerTests(unittest.TestCase):
    def _scan(self, text: str) -> tuple[ProcessingStats, DeclarationScanner]:
        stats = ProcessingStats()
        scanner = DeclarationScanner(stats, filename="main.c")
        scanner.scan(text)
        return stats, scanner

    def test_globals_and_single_line_main(self) -> None:
        stats, scanner = self._scan("int x;\nint 2y;\n\nint main(){int z;int 3w;return 0;}\n")
        self.assertEqual(stats.identifiers_checked, 4)
        self.assertEqual(stats.invalid_identifiers, 2)
        self.assertEqual(
            stats.findings,
            [IdentifierFinding("main.c", 2, "2y"), IdentifierFinding("main.c", 4, "3w")],
        )
        self.assertIs(scanner.state, ScanState.POST_ENTRY)

    def test_local_declarations_end_at_first_statement(self) -> None:
        source = (
            "int g;\n"
            "int main(void)\n"
            "{\n"
            "    int a;\n"
            "    char 5b;\n"
            "    if (a) {\n"
            "        int late;\n"
            "    }\n"
            "    int after;\n"
            "}\n"
        )
        stats, scanner = self._scan(source)
        self.assertEqual(stats.identifiers_checked, 3)
        self.assertEqual(stats.findings, [IdentifierFinding("main.c", 5, "5b")])
        self.assertIs(scanner.state, ScanState.POST_ENTRY)

    def test_lines_before_entry_brace_are_ignored(self) -> None:
        stats, _ = self._scan("int main()\nint ignored;\n{\nint 9z;\n}\n")
        self.assertEqual(stats.identifiers_checked, 1)
        self.assertEqual(stats.findings, [IdentifierFinding("main.c", 4, "9z")])

    def test_phase_transitions(self) -> None:
        stats = ProcessingStats()
        scanner = DeclarationScanner(stats)
        scanner.scan_line("#include <stdio.h>", 1)
        scanner.scan_line("   ", 2)
        self.assertIs(scanner.state, ScanState.PRE_ENTRY)
        scanner.scan_line("int x;", 3)
        self.assertIs(scanner.state, ScanState.GLOBAL_DECL)
        scanner.scan_line("int main(int argc, char **argv)", 4)
        self.assertIs(scanner.state, ScanState.SEEK_ENTRY_BRACE)
        scanner.scan_line("{", 5)
        self.assertIs(scanner.state, ScanState.ENTRY_LOCAL_DECL)
        scanner.scan_line("int y;", 6)
        self.assertIs(scanner.state, ScanState.ENTRY_LOCAL_DECL)
        scanner.scan_line("puts(\"hi\")", 7)
        self.assertIs(scanner.state, ScanState.ENTRY_CODE)
        scanner.scan_line("int z;", 8)
        scanner.scan_line("}", 9)
        self.assertIs(scanner.state, ScanState.POST_ENTRY)
        self.assertEqual(stats.identifiers_checked, 2)

    def test_main_must_be_a_whole_word(self) -> None:
        stats, scanner = self._scan("int domain(int a);\n")
        self.assertIs(scanner.state, ScanState.GLOBAL_DECL)
        self.assertEqual(stats.identifiers_checked, 3)

    def test_several_declarations_on_one_line(self) -> None:
        stats, _ = self._scan("int a; int 1b;\n")
        self.assertEqual(stats.identifiers_checked, 2)
        self.assertEqual(stats.findings, [IdentifierFinding("main.c", 1, "1b")])

    def test_nothing_is_checked_after_main(self) -> None:
        stats, scanner = self._scan("int main(){\n}\nint 1x;\n")
        self.assertEqual(stats.identifiers_checked, 0)
        self.assertIs(scanner.state, ScanState.POST_ENTRY)

    def test_findings_use_line_map(self) -> None:
        stats = ProcessingStats()
        scanner = DeclarationScanner(stats, filename="a.c", line_map=(("b.h", 1), ("a.c", 2)))
        scanner.scan("int 1a;\nint 2b;\n")
        self.assertEqual(
            stats.findings,
            [IdentifierFinding("b.h", 1, "1a"), IdentifierFinding("a.c", 2, "2b")],
        )


if __name__ == "__main__":
    unittest.main()
