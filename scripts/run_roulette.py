"""Run one round of Coffee Roulette on the configured pool and history.

Pseudocode:
1) Resolve the pool and history paths (POOL_FILE / HISTORY_FILE, or the
   ROULETTE_POOL_FILE / ROULETTE_HISTORY_FILE environment variables)
2) Load the participants and the history log
3) Compute the round with roulette.matcher.generate_round
4) Print the groups and append them to the history log

Notes:
- Meant to run once per week (other intervals work as well). Commit or back
  up the history log afterwards to persist the new pairs.
"""

from __future__ import annotations

from pathlib import Path
import sys

# Ensure project root (parent of scripts/) is on sys.path for package imports
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from roulette.config import default_history_file, default_pool_file, policy_from_env
from roulette.ingest import append_round, read_history, read_pool
from roulette.matcher import generate_round
from dotenv import load_dotenv


def main() -> None:
    """Entry point to run a single matching round.

    Raises:
        FileNotFoundError: If the pool file does not exist.
        roulette.errors.RouletteError: If the history is malformed or no matching exists.
    """
    load_dotenv()
    pool_file = default_pool_file()
    history_file = default_history_file()
    if not pool_file.exists():
        raise FileNotFoundError(f"Pool file not found: {pool_file}")

    # 1) Load participants and history
    print(f"[1/3] Loading participants from {pool_file} and history from {history_file}...")
    pool = read_pool(pool_file)
    records = read_history(history_file)
    print(f"       Loaded {len(pool)} participants and {len(records)} history records.")

    # 2) Match
    print("[2/3] Matching participants...")
    match_round = generate_round(pool, records, policy_from_env())
    for line in match_round.lines():
        print(f"   {line}")

    # 3) Persist
    print(f"[3/3] Appending round to {history_file}...")
    append_round(history_file, match_round)
    print(f"Done. Wrote {len(match_round.groups)} groups. Now push the history log to persist the new pairs.")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:
        print(f"Error: {exc}")
        sys.exit(1)
