from __future__ import annotations
import json
from pathlib import Path
from typing import IO, Optional
from .events import BaseEvent


class JsonFileObserver:
    """
    Appends one JSON line per event to ``events-<run_id>.jsonl`` under
    ``log_dir``. Events from other runs sharing the bus are skipped.
    """

    def __init__(self, log_dir: str | Path, run_id: str):
        self.run_id = run_id
        self.path = Path(log_dir) / f"events-{run_id}.jsonl"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh: Optional[IO[str]] = None

    def notify(self, event: BaseEvent) -> None:
        if event.run_id != self.run_id:
            return
        if self._fh is None:
            self._fh = self.path.open("a", buffering=1)
        record = {"event": event.__class__.__name__, **event.dict()}
        self._fh.write(json.dumps(record, sort_keys=True) + "\n")

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None
