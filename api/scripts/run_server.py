import argparse
import sys
from pathlib import Path

import uvicorn

sys.path.append(str(Path(__file__).resolve().parents[1]))

from perception.config import PORT


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the feedback API")
    parser.add_argument("--host", type=str, default="0.0.0.0")
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args()

    uvicorn.run("perception.main:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
