from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

from bfcc.config import CompilerConfig
from bfcc.translator import Compilation, Translator


@dataclass
class CompilationRecord:
    compilation_id: str
    compilation: Compilation
    config: CompilerConfig


class CompilationStore:
    """Thread-safe registry of compiled programs."""

    def __init__(self) -> None:
        self._records: Dict[str, CompilationRecord] = {}
        self._lock = threading.RLock()

    def create(self, *, source: str, config: Optional[CompilerConfig] = None) -> CompilationRecord:
        translator = Translator(config)
        compilation = translator.compile(source)
        record = CompilationRecord(
            compilation_id=uuid.uuid4().hex,
            compilation=compilation,
            config=translator.config,
        )
        with self._lock:
            self._records[record.compilation_id] = record
        return record

    def get(self, compilation_id: str) -> CompilationRecord:
        with self._lock:
            try:
                return self._records[compilation_id]
            except KeyError as exc:
                raise KeyError(f"Unknown compilation id: {compilation_id}") from exc

    def remove(self, compilation_id: str) -> bool:
        with self._lock:
            return self._records.pop(compilation_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


__all__ = ["CompilationRecord", "CompilationStore"]
