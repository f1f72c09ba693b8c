"""Fresh non-terminal names for one normalization run."""

from __future__ import annotations
from collections import defaultdict
from typing import Dict, Iterable, Set, Optional
import logging

log = logging.getLogger(__name__)


class FreshNames:
    """
    One counter per stem, never reset during a run. A name is handed out at
    most once and never equals a name in ``taken``.

        >>> fresh = FreshNames({"X1"})
        >>> fresh.new("X"), fresh.named("T", "a")
        ('X2', 'T_a')
    """

    def __init__(self, taken: Optional[Iterable[str]] = None):
        self.taken: Set[str] = set(taken or ())
        self.counters: Dict[str, int] = defaultdict(int)

    def _claim(self, name: str) -> str:
        self.taken.add(name)
        log.debug("allocated fresh symbol %s", name)
        return name

    def new(self, prefix: str = "X") -> str:
        while True:
            self.counters[prefix] += 1
            name = f"{prefix}{self.counters[prefix]}"
            if name not in self.taken:
                return self._claim(name)

    def named(self, prefix: str, hint: str) -> str:
        stem = f"{prefix}_{hint}"
        if stem not in self.taken:
            return self._claim(stem)
        return self.new(stem)
