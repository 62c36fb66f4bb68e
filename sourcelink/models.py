"""Records exchanged with the documentation pipeline."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .paths import normalize_path


@dataclass
class SourceFile:
    """A discovered source file and its hosted URL, once linked."""

    full_path: str
    url: Optional[str] = None


@dataclass
class SourceReference:
    """A (file, line) location attached to a documented element."""

    file: Optional[SourceFile]
    line: int
    url: Optional[str] = None


@dataclass
class Reflection:
    """A documented code element with its source locations."""

    name: str
    sources: List[SourceReference] = field(default_factory=list)


@dataclass
class Project:
    """The output of one analysis pass."""

    files: List[SourceFile] = field(default_factory=list)
    reflections: List[Reflection] = field(default_factory=list)

    def file_for(self, path: str) -> Optional[SourceFile]:
        """Return the file record whose normalized path matches ``path``."""
        return self._index().get(normalize_path(path))

    def iter_references(self) -> Iterator[SourceReference]:
        for reflection in self.reflections:
            yield from reflection.sources

    def _index(self) -> Dict[str, SourceFile]:
        return {normalize_path(source.full_path): source for source in self.files}
