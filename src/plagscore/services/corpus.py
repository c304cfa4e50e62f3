"""Corpus Index.

Language-partitioned store of normalized corpus entries.

Each partition is an immutable tuple. Writers build a new tuple under
the index's writer lock and swap it in; readers take whatever tuple is
current without locking, so they see a partition either before or
after a change, never halfway through it.
"""
import logging
import threading
from typing import Optional

from plagscore.schemas import CorpusEntry

logger = logging.getLogger(__name__)


class CorpusIndex:
    """Thread-safe, language-partitioned corpus of submissions."""

    def __init__(self):
        self._partitions: dict[str, tuple[CorpusEntry, ...]] = {}
        # entry id -> language of the partition holding it
        self._languages: dict[str, str] = {}
        # Guards _languages and every partition swap together
        self._writer = threading.RLock()

    def insert(self, entry: CorpusEntry) -> bool:
        """Insert an entry, replacing any entry with the same id.

        A replacement keeps the old entry's position in its partition.
        If the language changed, the entry leaves its old partition and
        is appended to the new one.

        Args:
            entry: Entry to store

        Returns:
            True if an existing entry was replaced
        """
        with self._writer:
            previous_language = self._languages.get(entry.id)
            moved = previous_language is not None and previous_language != entry.language
            if moved:
                self._discard(entry.id, previous_language)

            current = self._partitions.get(entry.language, ())
            replaced = any(existing.id == entry.id for existing in current)
            if replaced:
                current = tuple(entry if existing.id == entry.id else existing for existing in current)
            else:
                current = current + (entry,)
            self._partitions[entry.language] = current
            self._languages[entry.id] = entry.language

        logger.debug(f"{'Replaced' if replaced else 'Inserted'} corpus entry {entry.id} ({entry.language})")
        return replaced or moved

    def _discard(self, entry_id: str, language: str) -> bool:
        # Caller holds self._writer
        current = self._partitions.get(language, ())
        remaining = tuple(e for e in current if e.id != entry_id)
        if len(remaining) == len(current):
            return False
        self._partitions[language] = remaining
        self._languages.pop(entry_id, None)
        return True

    def remove(self, entry_id: str) -> bool:
        """Remove an entry by id.

        Returns:
            True if an entry was removed
        """
        with self._writer:
            language = self._languages.get(entry_id)
            if language is None or not self._discard(entry_id, language):
                return False

        logger.debug(f"Removed corpus entry {entry_id} ({language})")
        return True

    def remove_session(self, session_id: str) -> int:
        """Remove every entry belonging to a session.

        Returns:
            Number of entries removed
        """
        removed = 0
        with self._writer:
            for language, current in list(self._partitions.items()):
                remaining = tuple(e for e in current if e.session_id != session_id)
                if len(remaining) == len(current):
                    continue
                for entry in current:
                    if entry.session_id == session_id:
                        self._languages.pop(entry.id, None)
                self._partitions[language] = remaining
                removed += len(current) - len(remaining)
        return removed

    def candidates_for(self, language: str) -> tuple[CorpusEntry, ...]:
        """Snapshot of a language partition in insertion order."""
        return self._partitions.get(language.strip().lower(), ())

    def get(self, entry_id: str) -> Optional[CorpusEntry]:
        language = self._languages.get(entry_id)
        if language is None:
            return None
        for entry in self.candidates_for(language):
            if entry.id == entry_id:
                return entry
        return None

    def languages(self) -> list[str]:
        return [lang for lang, entries in list(self._partitions.items()) if entries]

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._languages

    def __len__(self) -> int:
        return sum(len(entries) for entries in list(self._partitions.values()))
