"""Fact sinks: where the emitted symbol/reference stream goes."""

import json
import threading
from typing import List, TextIO, Union

from .facts import Reference, Symbol

Fact = Union[Symbol, Reference]


class FactSink:
    """Receives facts in emission order. Subclasses override both methods."""

    def symbol(self, symbol: Symbol) -> None:
        raise NotImplementedError

    def reference(self, reference: Reference) -> None:
        raise NotImplementedError


class ListSink(FactSink):
    """Collects facts in memory."""

    def __init__(self):
        self.facts: List[Fact] = []
        self._lock = threading.Lock()

    def symbol(self, symbol: Symbol) -> None:
        with self._lock:
            self.facts.append(symbol)

    def reference(self, reference: Reference) -> None:
        with self._lock:
            self.facts.append(reference)

    @property
    def symbols(self) -> List[Symbol]:
        return [f for f in self.facts if isinstance(f, Symbol)]

    @property
    def references(self) -> List[Reference]:
        return [f for f in self.facts if isinstance(f, Reference)]

    def find_symbols(self, qualified_name: str) -> List[Symbol]:
        """Return every symbol fact with the given qualified name."""
        return [s for s in self.symbols if s.qualified_name == qualified_name]


class JsonLinesSink(FactSink):
    """Writes one JSON object per fact to a text stream.

    Writes are serialized so several indexing jobs can share one sink.
    """

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.count = 0
        self._lock = threading.Lock()

    def _write(self, payload: dict) -> None:
        line = json.dumps(payload, sort_keys=False)
        with self._lock:
            self.stream.write(line + "\n")
            self.count += 1

    def symbol(self, symbol: Symbol) -> None:
        self._write(symbol.to_dict())

    def reference(self, reference: Reference) -> None:
        self._write(reference.to_dict())
