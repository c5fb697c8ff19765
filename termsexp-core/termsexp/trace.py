from __future__ import annotations

import io
import json
from typing import Dict, Iterable, List

from termsexp.export import ExportEvent, ModuleEvent


class JSONLTracer:
    """Writes one numbered JSON line per export event.

    ``seq`` keeps counting across modules sharing the sink, so a trace of
    several exports can be split back on its ``module-begin`` lines.
    """

    def __init__(self, sink: io.TextIOBase):
        self.sink = sink
        self.seq = 0

    def __call__(self, event: ExportEvent | ModuleEvent) -> None:
        record = {"seq": self.seq, **event.to_record()}
        self.seq += 1
        self.sink.write(json.dumps(record, sort_keys=True))
        self.sink.write("\n")
        if isinstance(event, ModuleEvent) and event.phase == "end":
            self.sink.flush()


def dump_events(events: Iterable[ExportEvent | ModuleEvent]) -> List[dict]:
    return [ev.to_record() for ev in events]


def read_trace(lines: Iterable[str]) -> Dict[str, List[dict]]:
    """Group declaration records of a JSONL trace by module."""

    modules: Dict[str, List[dict]] = {}
    for line in lines:
        if not line.strip():
            continue
        record = json.loads(line)
        if record["event"] == "module-begin":
            modules.setdefault(record["module"], [])
        elif record["event"] == "declaration":
            modules.setdefault(record["module"], []).append(record)
    return modules
