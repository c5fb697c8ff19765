from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable

from termsexp.export import ExportOptions, ModuleExporter, is_visible
from termsexp.fingerprint import fingerprint_value
from termsexp.loader import load_module
from termsexp.sexp import render
from termsexp.sharing import measure_declarations
from termsexp.trace import JSONLTracer


def _read_dump(path: str) -> dict:
    """Load a module dump from a file path or stdin.

    Passing ``-`` reads from stdin to support piping dumps into the CLI.
    """

    if path == "-":
        return json.loads(sys.stdin.read())

    target = Path(path)
    if not target.exists():
        raise FileNotFoundError(path)
    return json.loads(target.read_text(encoding="utf-8"))


def _add_tracer(exporter: ModuleExporter, destination: str):
    sink = open(destination, "w", encoding="utf-8")
    exporter.event_hooks.append(JSONLTracer(sink))
    return sink


def run_cli(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Encode a compiled module dump as canonical S-expressions.")
    parser.add_argument("dump", help="Path to the module dump (JSON), or - for stdin")
    parser.add_argument("--output", "-o", dest="output", help="Write the encoding to a file instead of stdout")
    parser.add_argument(
        "--include-internal",
        action="store_true",
        help="Keep compiler-generated declarations instead of filtering them out",
    )
    parser.add_argument("--trace-jsonl", dest="trace_jsonl", help="Write export events to a JSONL file")
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print a JSON summary (counts, fingerprint, sharing) instead of the encoding",
    )

    args = parser.parse_args(list(argv) if argv is not None else None)

    sink = None

    try:
        module = load_module(_read_dump(args.dump))
        exporter = ModuleExporter(options=ExportOptions(include_internal=args.include_internal))
        sink = _add_tracer(exporter, args.trace_jsonl) if args.trace_jsonl else None

        encoded = exporter.export(module)
        text = render(encoded)

        if args.output:
            out_path = Path(args.output)
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_text(text + "\n", encoding="utf-8")

        if args.summary:
            kept = [
                decl
                for decl in module.declarations
                if args.include_internal or is_visible(decl.name, exporter.internal)
            ]
            sharing = measure_declarations(kept)
            summary = {
                "module": str(module.name),
                "fingerprint": fingerprint_value(encoded),
                "sharing": {
                    "distinct": sharing.distinct,
                    "shared": sharing.shared,
                    "revisits": sharing.revisits,
                },
                **exporter.stats(),
            }
            print(json.dumps(summary, indent=2))
        elif not args.output:
            print(text)
        return 0
    except Exception as exc:  # pragma: no cover - defensive shell entry
        print(f"termsexp: {exc}", file=sys.stderr)
        return 1
    finally:
        if sink is not None:
            sink.close()


def main() -> int:  # pragma: no cover - thin wrapper
    return run_cli()


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    sys.exit(main())
