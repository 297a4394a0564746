#!/usr/bin/env python3
"""Replay a recorded action log against a fresh state store.

Each line of the input file is one JSON action of the form
``{"type": "SELECT_DRIVE", "data": "/dev/sdb"}``.  Blank lines and lines
starting with ``#`` are skipped.  The final snapshot is printed as JSON.

Usage
-----
::

    python scripts/replay_actions.py actions.jsonl
    python scripts/replay_actions.py actions.jsonl --settings settings.json --verbose

Options::

    --settings FILE      Load/persist the settings subtree from/to FILE
    --keep-going         Report rejected actions and continue instead of stopping
    --output FILE        Write the final snapshot to FILE instead of stdout
    --verbose            Log every dispatch (DEBUG)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from flashcore import Action, StateStore, StoreConfig, ValidationError  # noqa: E402


def _read_actions(path: Path) -> list[tuple[int, Action]]:
    actions: list[tuple[int, Action]] = []
    for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        try:
            message = json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise SystemExit(f"{path}:{lineno}: invalid JSON: {exc}") from exc
        if not isinstance(message, dict):
            raise SystemExit(f"{path}:{lineno}: expected an object with a 'type' key")
        try:
            actions.append((lineno, Action.from_dict(message)))
        except ValidationError as exc:
            raise SystemExit(f"{path}:{lineno}: {exc}") from exc
    return actions


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Replay a JSON-lines action log through the state store.")
    parser.add_argument("actions", type=Path, help="JSON-lines file of actions")
    parser.add_argument("--settings", type=Path, default=None, help="settings file to load and persist")
    parser.add_argument("--keep-going", action="store_true", help="continue after a rejected action")
    parser.add_argument("--output", type=Path, default=None, help="write the final snapshot here")
    parser.add_argument("--verbose", action="store_true", help="log every dispatch")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = StoreConfig(settings_path=args.settings)
    rejected = 0
    with StateStore.from_config(config) as store:
        for lineno, action in _read_actions(args.actions):
            try:
                store.dispatch(action)
            except ValidationError as exc:
                rejected += 1
                print(f"{args.actions}:{lineno}: {action.type} rejected: {exc}", file=sys.stderr)
                if not args.keep_going:
                    return 1
        snapshot = store.get_state().model_dump(mode="json", by_alias=True, exclude_none=True)

    output = json.dumps(snapshot, indent=2, sort_keys=True)
    if args.output is not None:
        args.output.write_text(output + "\n", encoding="utf-8")
    else:
        print(output)
    return 1 if rejected else 0


if __name__ == "__main__":
    raise SystemExit(main())
