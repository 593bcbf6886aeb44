"""
Seed script for the Jan Awaaz issue store (JSON file or Firestore).

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to configured storage: python scripts/seed_db.py --apply
  - Pick a backend explicitly: python scripts/seed_db.py --apply --backend json

Behavior:
  - Loads `db_seed.json` (issues + users) from the repo root.
  - Validates every record against the Issue/User models first, so a bad
    seed never reaches storage.
  - Writes both collections wholesale through the repository, replacing
    what the backend held (documents missing from the seed are deleted).

NOTE: When applying to real Firestore, ensure `FIREBASE_CREDENTIALS_PATH` is set
and `STORAGE_BACKEND=firestore` (or pass --backend firestore).
"""

import argparse
import json
import os
from typing import List, Tuple

from app.models.issue import Issue
from app.models.user import User
from app.repositories.base import IssueRepository, parse_issues, parse_users
from app.repositories.resolver import build_repository


def load_seed(path: str = "./db_seed.json") -> Tuple[List[Issue], List[User]]:
    with open(path, "r", encoding="utf-8") as f:
        seed = json.load(f)
    return parse_issues(seed.get("issues", [])), parse_users(seed.get("users", []))


def write_to_repository(repository: IssueRepository, issues: List[Issue], users: List[User], apply: bool = False):
    for issue in issues:
        print(f"Preparing: issues/{issue.id} ({issue.category.value}, {issue.status.value})")
    for user in users:
        print(f"Preparing: users/{user.id}")
    if not apply:
        return
    repository.save(issues, users)
    print(f"Wrote {len(issues)} issue(s) and {len(users)} user(s) to {repository.name}")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to storage instead of dry-run")
    parser.add_argument("--backend", choices=["json", "firestore"], help="Override STORAGE_BACKEND")
    parser.add_argument("--seed", default=os.path.join(os.getcwd(), "db_seed.json"), help="Seed file path")
    args = parser.parse_args()

    if not os.path.exists(args.seed):
        print(f"Seed file not found: {args.seed}")
        return

    issues, users = load_seed(args.seed)
    repository = build_repository(args.backend)

    write_to_repository(repository, issues, users, apply=args.apply)

    if args.apply:
        print("Seeding completed.")
    else:
        print("Dry run complete. Re-run with --apply to write to storage.")


if __name__ == "__main__":
    main()
