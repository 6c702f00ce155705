import json
import sys
from pathlib import Path
from dotenv import load_dotenv

# Ensure project root is on sys.path when running this script directly
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

load_dotenv()

import argparse

from src.db.mongo import get_db
from src.db.slide_dal import get_slide_order, get_slides_coll


def main():
    parser = argparse.ArgumentParser(description="Show slide_state indexes, or the stored state of one presentation")
    parser.add_argument("presentation_id", nargs="?", help="Presentation to inspect")
    args = parser.parse_args()

    db = get_db()
    print("DB:", db.name)
    if "slide_state" not in db.list_collection_names():
        print("Collection slide_state does not exist yet; run scripts/init_db.py")
        raise SystemExit(1)

    if not args.presentation_id:
        for name, idx in db["slide_state"].index_information().items():
            print(" ", name, "=>", idx)
        return

    doc = get_slides_coll().find_one({"presentationId": args.presentation_id}, {"_id": 0})
    if not doc:
        print("No slide state stored for:", args.presentation_id)
        raise SystemExit(2)
    print("Slide order:", get_slide_order(args.presentation_id))
    print("Placements:")
    print(json.dumps(doc.get("placements") or {}, indent=2))


if __name__ == "__main__":
    main()
