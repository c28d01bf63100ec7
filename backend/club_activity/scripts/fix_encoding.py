"""Repair mojibake in stored free-text columns.

Text that was saved as UTF-8 but read back through a single-byte codec shows
up as sequences like ``cafÃ©`` or ``â€™``. This script rewrites those columns
in place. Run it once after importing legacy data:

    club-activity-fix-encoding --database-url sqlite:///./club_activity.db
"""

import argparse
import logging
import re

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from ..config import DATABASE_URL
from ..db import make_engine, session_scope
from ..logging_config import setup_logging
from ..models import Club, Event, Notification

logger = logging.getLogger(__name__)

_ACCENTED = "éèêëàáâãäçìíîïóôöúüñÜÖÄ"

# Longer sequences first; the lone "Â" is a leftover of non-breaking spaces.
REPLACEMENTS: list[tuple[str, str]] = [
    # cp850 view of UTF-8 punctuation
    ("ÔÇö", "—"),
    ("ÔÇô", "–"),
    ("ÔÇ£", "“"),
    ("ÔÇØ", "”"),
    ("ÔÇÖ", "’"),
    ("ÔÇª", "…"),
    # cp1252 view
    ("â€”", "—"),
    ("â€“", "–"),
    ("â€™", "’"),
    ("â€˜", "‘"),
    ("â€œ", "“"),
    ("â€\u009d", "”"),
    ("â€¢", "•"),
    ("â€¦", "…"),
    # latin-1 view
    ("â\u0080\u0094", "—"),
    ("â\u0080\u0093", "–"),
    ("â\u0080\u0099", "’"),
    ("â\u0080\u009c", "“"),
    ("â\u0080\u009d", "”"),
    ("â\u0080¢", "•"),
    ("â\u0080¦", "…"),
] + [(ch.encode("utf-8").decode("cp1252"), ch) for ch in _ACCENTED] + [("Â", "")]

MOJIBAKE_MARKERS = re.compile("Ã|Â|ÔÇ|â€|â\u0080|�")

# (model, primary key attribute, text attributes)
TEXT_COLUMNS = [
    (Club, "id", ["description"]),
    (Event, "id", ["title", "description"]),
    (Notification, "id", ["message"]),
]


def weird_score(text) -> int:
    if not text:
        return 0
    return len(MOJIBAKE_MARKERS.findall(text))


def fix_text(text):
    if not isinstance(text, str):
        return text
    out = text
    for bad, good in REPLACEMENTS:
        out = out.replace(bad, good)

    # Reinterpret as latin-1 bytes decoded as UTF-8 when that lowers the score
    try:
        recoded = out.encode("latin-1").decode("utf-8", errors="replace")
    except UnicodeEncodeError:
        # text already holds characters beyond latin-1; only the table applies,
        # since re-encoding would have to drop them
        return out
    if weird_score(recoded) < weird_score(out):
        out = recoded
    return out


def repair_database(session: Session) -> int:
    updated_rows = 0
    for model, pk, columns in TEXT_COLUMNS:
        for row in session.execute(select(model)).scalars():
            changed = False
            for column in columns:
                current = getattr(row, column)
                fixed = fix_text(current)
                if fixed != current:
                    setattr(row, column, fixed)
                    changed = True
            if changed:
                updated_rows += 1
                logger.debug("Repaired %s %s=%s", model.__tablename__, pk, getattr(row, pk))
    session.flush()
    return updated_rows


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Repair mojibake in club activity text columns.")
    parser.add_argument("--database-url", default=DATABASE_URL)
    args = parser.parse_args(argv)

    setup_logging()
    factory = sessionmaker(bind=make_engine(args.database_url), autoflush=False, autocommit=False)
    with session_scope(factory) as session:
        updated_rows = repair_database(session)
    print(f"Updated rows: {updated_rows}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
