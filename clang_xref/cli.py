"""
Index C/C++ translation units and print the symbol/reference facts.

Each fact is written as one JSON object per line.

Examples:
  clang-xref main.cpp -I include -D NDEBUG
  clang-xref -p build/compile_commands.json -j 8 -o facts.jsonl
  clang-xref editor.cpp --unsaved /tmp/buffer.cpp --flag=-std=c++17
"""

import argparse
import os
import sys
from typing import List, Optional

from . import compilation, diagnostics
from .compile_commands import CompileCommandsDatabase
from .indexer import index_many
from .indexer_config import IndexerConfig
from .sinks import JsonLinesSink


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clang-xref",
        description="Index C/C++ translation units with libclang",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("sources", nargs="*", help="Source files to index")

    parser.add_argument(
        "-I", "--include-path", action="append", default=[], metavar="DIR",
        help="Add an include path to every unit",
    )
    parser.add_argument(
        "-i", "--include", action="append", default=[], metavar="FILE",
        help="Pre-include FILE in every unit",
    )
    parser.add_argument(
        "-D", "--define", action="append", default=[], metavar="NAME[=VALUE]",
        help="Add a preprocessor define to every unit",
    )
    parser.add_argument(
        "--flag", action="append", default=[], metavar="FLAG",
        help="Pass FLAG verbatim to the front-end (use --flag=-std=c++17)",
    )
    parser.add_argument(
        "-p", "--compile-commands", metavar="FILE",
        help="Take per-file flags from a compile_commands.json",
    )
    parser.add_argument(
        "--unsaved", metavar="FILE",
        help="Index the content of FILE in place of the (single) source file",
    )
    parser.add_argument(
        "-C", "--directory", metavar="DIR",
        help="Working directory for relative paths (default: current directory)",
    )
    parser.add_argument(
        "-o", "--output", metavar="FILE",
        help="Write JSON lines to FILE instead of stdout",
    )
    parser.add_argument(
        "-j", "--thread-count", type=int, default=None, metavar="N",
        help="Number of units indexed in parallel (default: executor default)",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase diagnostic verbosity (repeatable)",
    )
    parser.add_argument("-L", "--log-file", metavar="FILE", help="Write diagnostics to FILE")
    parser.add_argument(
        "-A", "--append", action="store_true", help="Append to the log file instead of truncating it"
    )
    parser.add_argument(
        "--main-file-only", action="store_true",
        help="Only emit facts located in the primary source file",
    )
    parser.add_argument(
        "--locals", action="store_true", help="Index parameters and function-local declarations"
    )
    parser.add_argument(
        "--type-refs", action="store_true", help="Emit type_use references for every type reference"
    )
    parser.add_argument("--config", metavar="FILE", help="Configuration file (.clang-xref.json)")

    return parser


def _common_flags(args: argparse.Namespace) -> List[str]:
    flags = [f"-I{path}" for path in args.include_path]
    for header in args.include:
        flags.extend(["-include", header])
    flags.extend(f"-D{define}" for define in args.define)
    flags.extend(args.flag)
    return flags


def _build_units(args: argparse.Namespace, parser: argparse.ArgumentParser) -> List[compilation.CompilationUnit]:
    directory = os.path.abspath(args.directory or os.getcwd())
    common = _common_flags(args)

    unsaved_content = None
    if args.unsaved:
        if len(args.sources) != 1:
            parser.error("--unsaved requires exactly one source file")
        try:
            with open(args.unsaved, "r", encoding="utf-8") as f:
                unsaved_content = f.read()
        except OSError as e:
            parser.error(f"cannot read unsaved buffer {args.unsaved}: {e}")

    database = None
    if args.compile_commands:
        database = CompileCommandsDatabase(os.path.join(directory, args.compile_commands))

    sources = list(args.sources)
    if not sources and database is not None:
        sources = database.get_all_files()
    if not sources:
        parser.error("no source files given")

    units = []
    for source in sources:
        path = source if os.path.isabs(source) else os.path.join(directory, source)
        flags = list(common)
        working_directory = directory
        if database is not None:
            db_flags = database.get_flags(path)
            if db_flags is None:
                diagnostics.warning(f"No compile command for {path}, using command-line flags only")
            else:
                flags = db_flags + flags
                working_directory = database.get_directory(path)
        units.append(compilation.build(path, flags, unsaved_content, working_directory))
    return units


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    overrides = {}
    if args.main_file_only:
        overrides["main_file_only"] = True
    if args.locals:
        overrides["index_locals"] = True
    if args.type_refs:
        overrides["index_type_references"] = True

    config = IndexerConfig(search_dir=args.directory, overrides=overrides, config_file=args.config)
    verbose = args.verbose
    if not verbose and config.config_path is not None:
        # Without -v a loaded config file's diagnostics level stands
        verbose = None
    diagnostics.configure_from_verbosity(verbose, args.log_file, args.append)

    units = _build_units(args, parser)

    output = open(args.output, "w", encoding="utf-8") if args.output else sys.stdout
    try:
        sink = JsonLinesSink(output)
        results, failures = index_many(units, sink, config, max_workers=args.thread_count)
    finally:
        if output is not sys.stdout:
            output.close()

    diagnostics.info(
        f"Indexed {len(results)}/{len(units)} files, {sink.count} facts, {len(failures)} failed"
    )
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
