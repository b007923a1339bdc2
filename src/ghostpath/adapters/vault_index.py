from collections import defaultdict
from pathlib import Path, PurePosixPath

from ..core.model import CanonicalPath
from ..core.ports import LinkIndex

DOCUMENT_SUFFIXES = (".md",)


class VaultLinkIndex(LinkIndex):
    """
    Resolve short link names against the files of a vault directory.

    A note `areas/work/Project.md` answers to `Project`; an attachment
    `assets/diagram.png` answers to `diagram.png`. Every suffix in
    `extensions` counts as a note suffix and is stripped from resolved
    paths. Matching ignores case.
    When several files share a name, the one next to the referring note
    wins, then the one with the shortest path; a remaining tie is
    ambiguous and resolves to nothing.
    """

    def __init__(self, root: Path, extensions: tuple[str, ...] = DOCUMENT_SUFFIXES):
        self.root = root
        self.extensions = tuple(e.lower() for e in extensions)
        self._by_name: dict[str, list[str]] = defaultdict(list)
        self._paths: set[str] = set()
        self._built = False

    def _is_document(self, rel_path: str) -> bool:
        return PurePosixPath(rel_path).suffix.lower() in self.extensions

    def _key(self, rel_path: str) -> str:
        name = PurePosixPath(rel_path)
        return (name.stem if self._is_document(rel_path) else name.name).lower()

    def _strip_document_suffix(self, rel_path: str) -> str:
        if self._is_document(rel_path):
            return rel_path[: -len(PurePosixPath(rel_path).suffix)]
        return rel_path

    def rebuild(self) -> None:
        self._by_name.clear()
        self._paths.clear()
        if self.root.exists():
            for p in sorted(self.root.rglob("*")):
                rel = p.relative_to(self.root)
                if not p.is_file() or any(part.startswith(".") for part in rel.parts):
                    continue
                posix = rel.as_posix()
                self._paths.add(posix)
                self._by_name[self._key(posix)].append(posix)
        self._built = True

    def add(self, rel_path: str) -> None:
        """Register a file created after the last rebuild."""
        if rel_path in self._paths:
            return
        self._paths.add(rel_path)
        self._by_name[self._key(rel_path)].append(rel_path)

    def discard(self, rel_path: str) -> None:
        """Forget a file removed after the last rebuild."""
        if rel_path not in self._paths:
            return
        self._paths.discard(rel_path)
        paths = self._by_name.get(self._key(rel_path), [])
        if rel_path in paths:
            paths.remove(rel_path)

    def resolve(self, name: str, context_path: str) -> CanonicalPath | None:
        if not self._built:
            self.rebuild()

        name = name.strip().strip("/")
        if not name:
            return None

        # An exact vault path always wins
        for candidate in [name + ext for ext in self.extensions] + [name]:
            if candidate in self._paths:
                return self._strip_document_suffix(candidate)

        candidates = self._by_name.get(name.lower(), [])
        if not candidates and self._is_document(name):
            # [[Foo.md]] names the note Foo
            candidates = self._by_name.get(self._key(name), [])
        if not candidates:
            return None
        if len(candidates) == 1:
            return self._strip_document_suffix(candidates[0])

        context_dir = PurePosixPath(context_path).parent
        siblings = [c for c in candidates if PurePosixPath(c).parent == context_dir]
        if len(siblings) == 1:
            return self._strip_document_suffix(siblings[0])

        by_depth = sorted(candidates, key=lambda c: len(PurePosixPath(c).parts))
        if len(PurePosixPath(by_depth[0]).parts) < len(PurePosixPath(by_depth[1]).parts):
            return self._strip_document_suffix(by_depth[0])
        return None  # Ambiguous

    def paths(self) -> list[str]:
        if not self._built:
            self.rebuild()
        return sorted(self._paths)
