import json
import sys
from pathlib import Path

# Ensure project root is on sys.path when running this script directly
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import argparse

from src.asset_engine import normalize


def main():
    parser = argparse.ArgumentParser(description="Canonicalize asset references (URLs or paths)")
    parser.add_argument("refs", nargs="*", help="References to normalize; reads stdin lines when omitted")
    parser.add_argument("--json", action="store_true", help="Emit one JSON object per reference")
    args = parser.parse_args()

    refs = args.refs or [line.rstrip("\n") for line in sys.stdin]
    for raw in refs:
        result = normalize(raw)
        if args.json:
            print(json.dumps({"raw": raw, "path": result.path.path or None, "outcome": result.outcome.value}))
        else:
            print(f"{result.path.path or '<no asset>'}\t{result.outcome.value}")


if __name__ == "__main__":
    main()
