import argparse
import json
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from perception.config import DATA_FILE, DATABASE_URL, STORE_BACKEND
from perception.services.aggregation import summarize
from perception.store import open_store


def main() -> None:
    parser = argparse.ArgumentParser(description="Print the feedback analytics report")
    parser.add_argument("--backend", type=str, default=STORE_BACKEND, choices=["file", "sql"])
    parser.add_argument("--data-file", type=str, default=str(DATA_FILE))
    parser.add_argument("--database-url", type=str, default=DATABASE_URL)
    parser.add_argument("--include-incomplete", action="store_true")
    parser.add_argument("--with-responses", action="store_true")
    args = parser.parse_args()

    store = open_store(args.backend, data_file=args.data_file, database_url=args.database_url)
    sessions = store.list_sessions() if args.include_incomplete else store.list_completed()
    out = {"report": summarize(sessions).model_dump(mode="json", by_alias=True)}
    if args.with_responses:
        out["responses"] = [s.to_record() for s in sessions]

    print(json.dumps(out, indent=2))


if __name__ == "__main__":
    main()
