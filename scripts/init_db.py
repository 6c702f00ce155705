import sys
from pathlib import Path

# Ensure project root is on sys.path when running this script directly
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv
from pymongo import ASCENDING
from pymongo.errors import OperationFailure, CollectionInvalid

from src.db.mongo import get_db


def ensure_slide_state(db):
    validator = {
        "$jsonSchema": {
            "bsonType": "object",
            "required": ["presentationId"],
            "properties": {
                "presentationId": {"bsonType": "string"},
                "slideOrder": {"bsonType": "array", "items": {"bsonType": "string"}},
                "placements": {
                    "bsonType": "object",
                    "additionalProperties": {
                        "bsonType": "object",
                        "required": ["initialObjectFit", "initialFocusPoint"],
                        "properties": {
                            "initialObjectFit": {"enum": ["cover", "contain", "fill"]},
                            "initialFocusPoint": {
                                "bsonType": "object",
                                "required": ["x", "y"],
                                "properties": {
                                    "x": {"bsonType": ["double", "int"], "minimum": 0, "maximum": 100},
                                    "y": {"bsonType": ["double", "int"], "minimum": 0, "maximum": 100},
                                },
                            },
                        },
                    },
                },
            },
        }
    }
    try:
        db.create_collection("slide_state", validator=validator)
    except (OperationFailure, CollectionInvalid):
        # Already exists -> collMod (best-effort)
        try:
            db.command({"collMod": "slide_state", "validator": validator})
        except OperationFailure:
            pass

    db["slide_state"].create_index([("presentationId", ASCENDING)], unique=True, name="uniq_presentationId")


def main():
    load_dotenv()
    db = get_db()
    ensure_slide_state(db)
    print("Initialized MongoDB collection: slide_state (validator + indexes)")


if __name__ == "__main__":
    main()
