import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from .ledger import CreditLedger

logger = logging.getLogger(__name__)

STORAGE_KEY = "doctoralActivities"

class DataManager:
    """
    Handles all local persistence (Storage Layer).

    The storage file is a small JSON key-value document; the ledger record is
    kept under a fixed key so other keys in the same file survive a save.
    """

    def __init__(self, path: Union[str, Path], key: str = STORAGE_KEY):
        self.path = Path(path).expanduser()
        self.key = key

    def _read_document(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with self.path.open("r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s (%s); starting from an empty ledger", self.path, e)
            return {}

        if not isinstance(document, dict):
            logger.warning("Ignoring %s: expected a JSON object", self.path)
            return {}
        return document

    def _write_document(self, document: Dict[str, Any]):
        """Replaces the storage file atomically; write errors propagate."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".storage-", suffix=".json", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise

    def load_record(self) -> Optional[dict]:
        """Returns the raw ledger record, or None if nothing is stored yet."""
        record = self._read_document().get(self.key)
        if record is not None and not isinstance(record, dict):
            logger.warning("Ignoring stored %r: expected an object", self.key)
            return None
        return record

    def load_ledger(self, on_change: Optional[Callable[[CreditLedger], None]] = None) -> CreditLedger:
        """
        Loads the ledger stored under the fixed key.
        A missing or unreadable file yields an empty ledger.
        """
        ledger = CreditLedger.from_record(self.load_record(), on_change=on_change)
        logger.info("Loaded %d entries from %s", len(ledger), self.path)
        return ledger

    def save_ledger(self, ledger: CreditLedger):
        """Re-serialises the whole ledger under the fixed key."""
        document = self._read_document()
        document[self.key] = ledger.to_record()
        self._write_document(document)
        logger.debug("Saved %d entries to %s", len(ledger), self.path)

    def clear(self):
        """Removes the ledger record, keeping any other stored keys."""
        document = self._read_document()
        if document.pop(self.key, None) is None:
            return

        self._write_document(document)
        logger.info("Cleared stored ledger in %s", self.path)
