from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from objcompiler.compiler import ObjectCreationCompiler
from objcompiler.emitter import PythonEmitter
from objcompiler.errors import CompilationError
from objcompiler.exporter import compile_definitions, compiled_to_dict, export_definitions
from objcompiler.loader import load_definitions

logger = logging.getLogger("objcompiler")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="objcompiler",
        description=(
            "Compile JSON object definitions into construction instructions "
            "or Python factory source."
        ),
    )
    parser.add_argument(
        "definitions",
        help="Path to the JSON definitions file.",
    )
    parser.add_argument(
        "--output",
        default=None,
        help=(
            "Directory where instructions.json and factories.py are written. "
            "When omitted, the result is printed to stdout."
        ),
    )
    parser.add_argument(
        "--format",
        choices=("json", "python"),
        default="json",
        help="Output printed to stdout when --output is not given.",
    )
    parser.add_argument(
        "--path",
        action="append",
        default=[],
        help="Extra directory prepended to sys.path so target classes can be imported.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log each compiled entry.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    for extra in reversed(args.path):
        sys.path.insert(0, str(Path(extra).resolve()))

    compiler = ObjectCreationCompiler()
    try:
        definitions = load_definitions(args.definitions)
        if args.output:
            compiled = export_definitions(definitions, args.output, compiler)
            output_dir = Path(args.output).resolve()
            logger.info("Compiled %d entries into %s", len(compiled), output_dir)
            print(f"- {output_dir / 'instructions.json'}")
            print(f"- {output_dir / 'factories.py'}")
            return 0
        compiled = compile_definitions(definitions, compiler)
        if args.format == "python":
            rendered = PythonEmitter().emit_module(compiled)
        else:
            rendered = json.dumps(compiled_to_dict(compiled), indent=2, sort_keys=True) + "\n"
    except (CompilationError, OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    sys.stdout.write(rendered)
    return 0


if __name__ == "__main__":
    sys.exit(main())
