from typing import Callable, Dict, List, Optional

from .interfaces import BaseConfigSource

SourceFactory = Callable[[], BaseConfigSource]


class SourceRegistry:
    """Configuration sources by code; a source class registers under its own `code`."""

    def __init__(self, *sources: SourceFactory):
        self._sources: Dict[str, SourceFactory] = {}
        for source in sources:
            self.add(source)

    def add(self, source: SourceFactory, code: Optional[str] = None) -> SourceFactory:
        code = code or getattr(source, "code", None)
        if not code:
            raise ValueError(f"Source {source!r} needs a code")
        self._sources[code] = source
        return source

    def __contains__(self, code: str) -> bool:
        return code in self._sources

    def codes(self) -> List[str]:
        return sorted(self._sources)

    def resolve(self, code: str) -> BaseConfigSource:
        if code not in self:
            raise ValueError(f"Unknown configuration source {code!r} (known: {', '.join(self.codes())})")
        return self._sources[code]()
