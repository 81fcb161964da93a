"""Per-session conversation log with change notification.

Two backends share one interface: :class:`InMemoryMessageStore` for tests
and single-process demos, and :class:`JsonlMessageStore`, which keeps one
``<session>.jsonl`` log per session under ``~/.glowup/sessions/``.  A session
read for the first time is seeded with the persona's greeting.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable

from glowup.llm.prompts import INITIAL_GREETING
from glowup.models import Message, Role

logger = logging.getLogger(__name__)

Listener = Callable[[str], None]


def _safe_filename(name: str) -> str:
    """Sanitise a session id for use as a filename."""
    return re.sub(r"[^\w\-.]", "_", name)


def greeting_message() -> Message:
    return Message(role=Role.assistant, content=INITIAL_GREETING, id="init-1")


class MessageStore(ABC):
    """Append-only message log plus the shared "is drafting" flag."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()

    # -- backend hooks -------------------------------------------------------

    @abstractmethod
    def _load(self, session_id: str) -> list[Message] | None:
        """Return the stored log, or ``None`` if the session has none yet."""

    @abstractmethod
    def _write(self, session_id: str, message: Message) -> None:
        ...

    @abstractmethod
    def _clear(self, session_id: str) -> None:
        ...

    @abstractmethod
    def _get_flag(self, session_id: str) -> bool:
        ...

    @abstractmethod
    def _set_flag(self, session_id: str, value: bool) -> None:
        ...

    # -- public API ----------------------------------------------------------

    def read(self, session_id: str) -> list[Message]:
        """Return the session's messages in arrival order."""
        with self._lock:
            messages = self._load(session_id)
            if messages is None:
                greeting = greeting_message()
                self._write(session_id, greeting)
                messages = [greeting]
            return messages

    def visible(self, session_id: str) -> list[Message]:
        """Messages the end user may see (no operator-only context)."""
        return [m for m in self.read(session_id) if m.visible_to_user]

    def append(self, session_id: str, message: Message) -> Message:
        with self._lock:
            self.read(session_id)
            self._write(session_id, message)
        self._notify(session_id)
        return message

    def is_drafting(self, session_id: str) -> bool:
        with self._lock:
            return self._get_flag(session_id)

    def set_drafting(self, session_id: str, value: bool) -> None:
        with self._lock:
            self._set_flag(session_id, value)
        self._notify(session_id)

    def reset(self, session_id: str) -> None:
        with self._lock:
            self._clear(session_id)
        self._notify(session_id)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; call the returned function to unsubscribe."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, session_id: str) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(session_id)
            except Exception:
                logger.exception("Message store listener failed for session %s", session_id)


class InMemoryMessageStore(MessageStore):
    def __init__(self) -> None:
        super().__init__()
        self._logs: dict[str, list[Message]] = {}
        self._drafting: dict[str, bool] = {}

    def _load(self, session_id: str) -> list[Message] | None:
        log = self._logs.get(session_id)
        return list(log) if log is not None else None

    def _write(self, session_id: str, message: Message) -> None:
        self._logs.setdefault(session_id, []).append(message)

    def _clear(self, session_id: str) -> None:
        self._logs.pop(session_id, None)
        self._drafting.pop(session_id, None)

    def _get_flag(self, session_id: str) -> bool:
        return self._drafting.get(session_id, False)

    def _set_flag(self, session_id: str, value: bool) -> None:
        self._drafting[session_id] = value


class JsonlMessageStore(MessageStore):
    """File-backed store.

    Storage path: ``~/.glowup/sessions/`` with:
    - ``<session>.jsonl`` -- one message per line, in arrival order
    - ``<session>.drafting`` -- present while a draft is being generated
    """

    def __init__(self, base_dir: str | Path | None = None) -> None:
        super().__init__()
        self._base = Path(base_dir) if base_dir else Path.home() / ".glowup" / "sessions"
        self._base.mkdir(parents=True, exist_ok=True)

    def _log_path(self, session_id: str) -> Path:
        return self._base / f"{_safe_filename(session_id)}.jsonl"

    def _flag_path(self, session_id: str) -> Path:
        return self._base / f"{_safe_filename(session_id)}.drafting"

    def _load(self, session_id: str) -> list[Message] | None:
        path = self._log_path(session_id)
        if not path.exists():
            return None
        messages: list[Message] = []
        for line in path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                messages.append(Message.from_dict(json.loads(line)))
            except (json.JSONDecodeError, KeyError, ValueError):
                logger.warning("Skipping unreadable line in %s", path.name)
        return messages

    def _write(self, session_id: str, message: Message) -> None:
        with self._log_path(session_id).open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(message.to_dict()) + "\n")

    def _clear(self, session_id: str) -> None:
        self._log_path(session_id).unlink(missing_ok=True)
        self._flag_path(session_id).unlink(missing_ok=True)

    def _get_flag(self, session_id: str) -> bool:
        return self._flag_path(session_id).exists()

    def _set_flag(self, session_id: str, value: bool) -> None:
        path = self._flag_path(session_id)
        if value:
            path.touch()
        else:
            path.unlink(missing_ok=True)
