import argparse
import json
import sys
from collections.abc import Sequence
from typing import TextIO, cast

from xpc.diag import Diagnostic, PipelineError
from xpc.options import MAX_INCLUDE_DEPTH, DiagFormat, PipelineOptions
from xpc.pipeline import process_path, write_output
from xpc.stats import format_stats, stats_to_dict


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xpc",
        description="Inline local includes, strip comments and check declared identifiers "
        "in a C source file.",
    )
    parser.add_argument("input", nargs="?", help="path to a C source file, or - to read from stdin")
    parser.add_argument("-i", "--in", dest="input_option", help="input file (alternative to INPUT)")
    parser.add_argument("-o", "--out", dest="output", help="output file (default: stdout)")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="print processing statistics on stderr",
    )
    parser.add_argument(
        "--diag-format",
        choices=("human", "json"),
        default="human",
        help="diagnostic output format",
    )
    parser.add_argument(
        "--squeeze-comment-lines",
        action="store_true",
        help="do not write lines left blank by comment removal",
    )
    parser.add_argument(
        "--max-include-depth",
        type=int,
        default=MAX_INCLUDE_DEPTH,
        help=f"include nesting limit (default: {MAX_INCLUDE_DEPTH})",
    )
    parser.add_argument(
        "--dump-include-trace",
        action="store_true",
        help="print include resolution trace on stderr",
    )
    return parser


def _print_diagnostic(diagnostic: Diagnostic, diag_format: DiagFormat) -> None:
    if diag_format == "json":
        print(json.dumps(diagnostic.to_dict(), separators=(",", ":")), file=sys.stderr)
    else:
        print(f"xpc: {diagnostic}", file=sys.stderr)


def main(argv: Sequence[str] | None = None, *, stdin: TextIO | None = None) -> int:
    parser = _build_arg_parser()
    effective_argv = list(argv) if argv is not None else sys.argv[1:]
    try:
        args = parser.parse_args(effective_argv)
    except SystemExit as error:
        return cast(int, error.code)
    if (args.input is None) == (args.input_option is None):
        print("xpc: usage error: expected exactly one input file", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 2
    input_path = args.input if args.input is not None else args.input_option
    try:
        options = PipelineOptions(
            max_include_depth=args.max_include_depth,
            squeeze_comment_lines=args.squeeze_comment_lines,
            diag_format=args.diag_format,
        )
    except ValueError as error:
        print(f"xpc: usage error: {error}", file=sys.stderr)
        return 2
    try:
        result = process_path(input_path, options=options, stdin=stdin)
        for diagnostic in result.diagnostics:
            _print_diagnostic(diagnostic, options.diag_format)
        write_output(result.output, args.output)
    except PipelineError as error:
        _print_diagnostic(error.diagnostic, options.diag_format)
        return 1
    if args.dump_include_trace:
        for line in result.include_trace:
            print(line, file=sys.stderr)
    if args.verbose:
        if options.diag_format == "json":
            print(json.dumps(stats_to_dict(result.stats), separators=(",", ":")), file=sys.stderr)
        else:
            for line in format_stats(result.stats):
                print(line, file=sys.stderr)
    return 0
