# Copyright 2025 API Change Ledger contributors
# License AGPL-3.0 or later (http://www.gnu.org/licenses/agpl)

import json
import os
import stat
import tempfile
from pathlib import Path
from typing import Iterable, List

from pydantic import ValidationError

from ..exceptions import LedgerStoreError
from ..models import ChangeRecord

import logging

logger = logging.getLogger(__name__)


def dump_ledger(records: Iterable[ChangeRecord]) -> str:
    data = [record.model_dump(exclude_none=True) for record in records]
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


class JsonLedgerStore:
    """The ledger as a single pretty-printed JSON array on disk.

    Writes go to a temporary file next to the target which is then renamed
    over it, so a reader sees either the old or the new document.
    """

    def __init__(self, path):
        self.path = Path(path)

    def __repr__(self):
        return f"JsonLedgerStore({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> List[ChangeRecord]:
        if not self.exists():
            err_msg = 'Ledger %s does not exist' % self.path
            logger.error(err_msg)
            raise LedgerStoreError(err_msg)
        logger.debug(f"Reading ledger from {self.path}")
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise LedgerStoreError(f"Ledger {self.path} is not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise LedgerStoreError(f"Ledger {self.path} must hold a JSON array")
        try:
            return [ChangeRecord.model_validate(item) for item in data]
        except ValidationError as e:
            raise LedgerStoreError(f"Ledger {self.path} holds an invalid record: {e}") from e

    def _file_mode(self) -> int:
        # mkstemp creates 0600 files; keep the existing mode or follow the umask
        if self.exists():
            return stat.S_IMODE(self.path.stat().st_mode)
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask

    def write(self, records: Iterable[ChangeRecord]) -> None:
        content = dump_ledger(records)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.chmod(tmp_name, self._file_mode())
            os.replace(tmp_name, self.path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote ledger to {self.path}")
