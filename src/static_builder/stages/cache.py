from __future__ import annotations

from typing import Callable, Dict, Iterator, Optional, Tuple

from static_builder.logging import get_logger

log = get_logger()

class BuildCache:
    """
    Compiled output per output path, for one build.

    Keyed by output path, not by source: once a path is built it is never
    recomputed. A different source mapping onto an already-built path gets the
    first source's output; that collision is logged, not raised.
    Not safe for concurrent use.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, str] = {}
        self._sources: Dict[str, str] = {}
        self.hits = 0

    def __contains__(self, output_path: str) -> bool:
        return output_path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, output_path: str) -> Optional[str]:
        return self._entries.get(output_path)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self._entries.items())

    def get_or_compute(self, output_path: str, compute: Callable[[], str], *, source: Optional[str] = None) -> str:
        if output_path in self._entries:
            self.hits += 1
            first = self._sources.get(output_path)
            if source is not None and first is not None and first != source:
                log.warning("%s already built from %s; reusing it for %s", output_path, first, source)
            return self._entries[output_path]

        content = compute()
        self._entries[output_path] = content
        if source is not None:
            self._sources[output_path] = source
        return content
