"""Named grammars saved to a JSON file.

The file holds a list of records:

    {"key": "ecfg_1700000000000", "name": "arith", "updatedAt": 1700000000000,
     "data": {"terminals": [...], "nonTerminals": [...], "productions": [...],
              "startSymbol": "E"}}

`updatedAt` is in milliseconds since the epoch.
"""
import json
import logging
import os
import tempfile
import time
from pathlib import Path

log = logging.getLogger(__name__)

KEY_PREFIX = "ecfg_"


def now_ms() -> int:
    return int(time.time() * 1000)


class GrammarStore:

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def records(self) -> list[dict]:
        if not self.path.exists():
            return []
        with self.path.open(encoding="utf-8") as f:
            records = json.load(f)
        if not isinstance(records, list):
            raise ValueError(f"{self.path} does not hold a list of saved grammars")
        return records

    def write(self, records: list[dict]):
        """Replaces the file in one step; it is left untouched if `records` cannot
        be serialized or the write fails."""
        text = json.dumps(records, ensure_ascii=False, indent=2)

        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, self.path)
        except BaseException:
            os.unlink(tmp)
            raise

    def entries(self) -> list[dict]:
        """`key`, `name` and `updatedAt` of every record, most recent first."""
        items = [
            {"key": r["key"], "name": r["name"], "updatedAt": r["updatedAt"]}
            for r in self.records()
        ]
        items.sort(key=lambda r: r["updatedAt"], reverse=True)
        return items

    def find(self, key_or_name: str) -> dict:
        """Record with this key, or else the most recent record with this name."""
        records = self.records()
        for r in records:
            if r["key"] == key_or_name:
                return r
        named = [r for r in records if r["name"] == key_or_name]
        if not named:
            raise KeyError(key_or_name)
        return max(named, key=lambda r: r["updatedAt"])

    def load(self, key_or_name: str) -> dict:
        return self.find(key_or_name)["data"]

    def save(self, name: str, data: dict) -> str:
        """Saves `data` as a new record, even if `name` is taken. Returns its key."""
        records = self.records()
        updated_at = now_ms()
        keys = {r["key"] for r in records}

        stamp = updated_at
        while f"{KEY_PREFIX}{stamp}" in keys:
            stamp += 1
        key = f"{KEY_PREFIX}{stamp}"

        records.append({"key": key, "name": name, "updatedAt": updated_at, "data": data})
        self.write(records)
        log.info("Saved grammar '%s' as %s", name, key)
        return key

    def overwrite(self, key: str, data: dict):
        records = self.records()
        for r in records:
            if r["key"] == key:
                r["data"] = data
                r["updatedAt"] = now_ms()
                break
        else:
            raise KeyError(key)
        self.write(records)
        log.info("Overwrote %s", key)

    def delete(self, key: str):
        records = self.records()
        remaining = [r for r in records if r["key"] != key]
        if len(remaining) == len(records):
            raise KeyError(key)
        self.write(remaining)
        log.info("Deleted %s", key)
