import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from tests import _bootstrap  # noqa: F401
from xpc.diag import IO_FAILURE, NOT_FOUND, PipelineError
from xpc.loader import count_lines, encoded_size, load_source, source_from_text


class LoaderTests(unittest.TestCase):
    def test_count_lines(self) -> None:
        self.assertEqual(count_lines(""), 0)
        self.assertEqual(count_lines("int x;"), 1)
        self.assertEqual(count_lines("int x;\n"), 1)
        self.assertEqual(count_lines("int x;\nint y;"), 2)
        self.assertEqual(count_lines("\n\n"), 2)

    def test_load_source_reports_size_and_lines(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "a.c"
            path.write_bytes(b"int x;\nint y;")
            source = load_source(path)
        self.assertEqual(source.filename, str(path))
        self.assertEqual(source.text, "int x;\nint y;")
        self.assertEqual(source.size_bytes, 13)
        self.assertEqual(source.line_count, 2)

    def test_load_source_keeps_undecodable_bytes(self) -> None:
        data = b"char c = '\xff';\n"
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "latin.c"
            path.write_bytes(data)
            source = load_source(path)
        self.assertEqual(source.size_bytes, len(data))
        self.assertEqual(encoded_size(source.text), len(data))

    def test_load_source_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(PipelineError) as ctx:
                load_source(Path(tmp) / "missing.c")
        self.assertEqual(ctx.exception.code, NOT_FOUND)
        self.assertEqual(ctx.exception.diagnostic.stage, "load")

    def test_load_source_directory_is_not_found(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(PipelineError) as ctx:
                load_source(tmp, stage="include")
        self.assertEqual(ctx.exception.code, NOT_FOUND)
        self.assertEqual(ctx.exception.diagnostic.stage, "include")

    def test_load_source_read_failure(self) -> None:
        with patch("xpc.loader.open", side_effect=OSError(5, "Input/output error"), create=True):
            with self.assertRaises(PipelineError) as ctx:
                load_source("broken.c")
        self.assertEqual(ctx.exception.code, IO_FAILURE)

    def test_source_from_text(self) -> None:
        source = source_from_text("a\nb\n", filename="mem.c")
        self.assertEqual(source.filename, "mem.c")
        self.assertEqual(source.size_bytes, 4)
        self.assertEqual(source.line_count, 2)


if __name__ == "__main__":
    unittest.main()
