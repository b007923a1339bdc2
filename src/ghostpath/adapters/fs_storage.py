from pathlib import Path
from typing import Iterable


class FsStorage:
    """Notes as files under a vault root, addressed by vault-relative POSIX paths."""

    def __init__(self, root: Path, extensions: tuple[str, ...] = (".md",)):
        self.root = root
        self.extensions = tuple(e.lower() for e in extensions)

    def _path(self, rel_path: str) -> Path:
        return self.root / rel_path

    def relative(self, path: Path) -> str:
        return path.resolve().relative_to(self.root.resolve()).as_posix()

    def is_note(self, path: Path) -> bool:
        name = path.name
        if name.startswith(".") or name.endswith("~") or name.endswith(".swp"):
            return False
        return path.suffix.lower() in self.extensions

    def read_raw(self, rel_path: str) -> str | None:
        p = self._path(rel_path)
        return p.read_text(encoding="utf-8") if p.exists() else None

    def write_raw(self, rel_path: str, contents: str) -> None:
        p = self._path(rel_path)
        p.parent.mkdir(parents=True, exist_ok=True)
        # Atomic write via temp file
        tmp = p.with_name(p.name + ".tmp")
        tmp.write_text(contents, encoding="utf-8")
        tmp.replace(p)

    def list_notes(self) -> Iterable[str]:
        if not self.root.exists():
            return []
        for p in sorted(self.root.rglob("*")):
            rel = p.relative_to(self.root)
            if any(part.startswith(".") for part in rel.parts):
                continue
            if p.is_file() and self.is_note(p):
                yield rel.as_posix()
