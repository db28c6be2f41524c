from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .codec import decode, encode
from .config import Config
from .errors import NotFoundError
from .model import DictValue, Value, validate_tree


@dataclass
class Session:
    """Editing state for one file: the value tree, where it came from, and
    whether it has unsaved changes.

    The tree is owned by the session; command handlers are its only writers.
    """

    root: Value = field(default_factory=DictValue)
    path: Path | None = None
    dirty: bool = False
    config: Config = field(default_factory=Config)

    @classmethod
    def load(cls, path: Path, config: Config | None = None) -> Session:
        """Decode ``path`` into a new session.

        A missing file raises ``FileNotFoundError`` unless
        ``config.create_missing`` is set, in which case the session starts
        from an empty dictionary bound to ``path``.
        """
        cfg = config or Config()
        path = Path(path)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            if not cfg.create_missing:
                raise
            return cls(root=DictValue(), path=path, dirty=False, config=cfg)
        return cls(root=decode(data), path=path, dirty=False, config=cfg)

    def reload(self) -> None:
        if self.path is None:
            raise NotFoundError("Session has no file path to reload from")
        fresh = Session.load(self.path, self.config)
        self.root = fresh.root
        self.dirty = False

    def save(self) -> Path:
        if self.path is None:
            raise NotFoundError("Session has no file path; use save-as <path>")
        return self.save_as(self.path)

    def save_as(self, path: Path) -> Path:
        path = Path(path)
        validate_tree(self.root)
        path.write_bytes(encode(self.root))
        self.path = path
        self.dirty = False
        return path
