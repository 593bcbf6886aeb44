"""
JSON file repository - local development storage.

Layout (single document):
    {"issues": [...], "users": [...]}

Writes go to a temporary file in the same directory, are fsync'd, then
atomically swapped in with os.replace(). A crash mid-write leaves the
previous file intact instead of a truncated document.
"""

from pathlib import Path
from typing import List, Sequence, Tuple
import json
import logging
import os
import tempfile

from app.models.issue import Issue
from app.models.user import User
from app.repositories.base import IssueRepository, dump_records, parse_issues, parse_users

logger = logging.getLogger(__name__)


class JsonFileRepository(IssueRepository):
    name = "json"

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Tuple[List[Issue], List[User]]:
        if not self.path.exists():
            logger.info(f"[STORAGE] No data file at {self.path}, starting empty")
            return [], []

        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)

        issues = parse_issues(data.get("issues", []))
        users = parse_users(data.get("users", []))
        logger.info(f"[STORAGE] Loaded {len(issues)} issue(s) and {len(users)} user(s) from {self.path}")
        return issues, users

    def save(self, issues: Sequence[Issue], users: Sequence[User]) -> None:
        payload = {"issues": dump_records(issues), "users": dump_records(users)}

        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=str(directory))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise

        logger.debug(f"[STORAGE] Saved {len(issues)} issue(s) to {self.path}")

    def describe(self):
        return {
            "backend": self.name,
            "path": str(self.path),
            "exists": self.path.exists(),
        }
