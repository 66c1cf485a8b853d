"""
Imports crime reports from a JSONL file into the database.

Each line is one report, e.g.
{"type": "Theft", "location": "Market Square", "address": "1 Market St", "latitude": 51.5, "longitude": -0.12, "details": "..."}

Reports go through the crime record engine, so severity is classified the
same way as for submissions made through the API.

Usage: python scripts/import_crimes_jsonl.py crimes.jsonl
"""
import json
import logging
import sys
from pathlib import Path

# Make the backend package importable when run from a checkout
backend_path = Path(__file__).parent.parent / "backend"
sys.path.insert(0, str(backend_path))

from streetsafety.core.exceptions import StreetSafetyError
from streetsafety.db.session import SessionLocal, init_db
from streetsafety.services.crimes.engine import CrimeRecordEngine
from streetsafety.services.crimes.store import CrimeStore

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ['type', 'location', 'address', 'latitude', 'longitude']


def import_crimes_from_jsonl(jsonl_file_path: str, skip_errors: bool = True) -> dict:
    """
    Import crime reports from a JSONL file.

    Args:
        jsonl_file_path: Path of the JSONL file
        skip_errors: Skip invalid lines (True) or stop at the first one (False)

    Returns:
        Statistics: {'total': int, 'added': int, 'skipped': int, 'errors': list}
    """
    file_path = Path(jsonl_file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {jsonl_file_path}")

    init_db()
    db = SessionLocal()
    engine = CrimeRecordEngine(CrimeStore(db))

    stats = {
        'total': 0,
        'added': 0,
        'skipped': 0,
        'errors': []
    }

    def skip(message: str):
        stats['errors'].append(message)
        stats['skipped'] += 1
        if not skip_errors:
            raise ValueError(message)

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue

                stats['total'] += 1

                try:
                    item = json.loads(line)
                except json.JSONDecodeError as e:
                    skip(f"Line {line_num}: JSON parse error: {e}")
                    continue

                missing_fields = [field for field in REQUIRED_FIELDS if item.get(field) in (None, '')]
                if missing_fields:
                    skip(f"Line {line_num}: Missing fields: {missing_fields}")
                    continue

                try:
                    lat = float(item['latitude'])
                    lng = float(item['longitude'])
                except (TypeError, ValueError):
                    skip(f"Line {line_num}: Invalid coordinates")
                    continue

                if not (-90 <= lat <= 90) or not (-180 <= lng <= 180):
                    skip(f"Line {line_num}: Coordinates out of range: ({lat}, {lng})")
                    continue

                try:
                    engine.submit(
                        crime_type=str(item['type'])[:100],
                        location=str(item['location']),
                        address=str(item['address']),
                        details=item.get('details'),
                        coordinates=(lat, lng),
                    )
                except StreetSafetyError as e:
                    skip(f"Line {line_num}: {e}")
                    continue

                stats['added'] += 1

        logger.info(
            f"Import finished: {stats['total']} lines, {stats['added']} added, {stats['skipped']} skipped"
        )
        for error in stats['errors'][:10]:
            logger.warning(error)
        if len(stats['errors']) > 10:
            logger.warning(f"... and {len(stats['errors']) - 10} more errors")

        return stats
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python scripts/import_crimes_jsonl.py <jsonl_file>")
        sys.exit(1)

    try:
        import_crimes_from_jsonl(sys.argv[1])
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Import failed: {e}")
        sys.exit(1)
