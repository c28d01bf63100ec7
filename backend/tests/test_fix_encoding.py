from datetime import datetime

from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from club_activity.db import Base
from club_activity import models
from club_activity.scripts.fix_encoding import fix_text, main, repair_database, weird_score


def test_fix_text_repairs_common_sequences():
    assert fix_text("cafÃ©") == "café"
    assert fix_text("Itâ€™s here â€” finally") == "It’s here — finally"
    assert fix_text("ÔÇ£quotedÔÇØ") == "“quoted”"
    assert fix_text("MÃ¼nchen") == "München"
    assert fix_text("100Â%") == "100%"


def test_fix_text_uses_latin1_reinterpretation_when_it_helps():
    # "ÿ" is not in the replacement table
    assert fix_text("Ã¿") == "ÿ"


def test_fix_text_skips_reinterpretation_beyond_latin1():
    # the em dash cannot be encoded as latin-1, so only table replacements run
    assert fix_text("Ã¿ — ok") == "Ã¿ — ok"
    assert fix_text("cafÃ© — ok") == "café — ok"


def test_fix_text_leaves_clean_text_alone():
    for text in ("plain ascii", "café", "Hello — world", ""):
        assert fix_text(text) == text
    assert fix_text(None) is None
    assert fix_text(42) == 42


def test_weird_score():
    assert weird_score("") == 0
    assert weird_score(None) == 0
    assert weird_score("cafÃ© Â") == 2


def _seeded_factory(url: str):
    engine = create_engine(url)
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    with factory() as session:
        session.add_all(
            [
                models.Club(club_name="Cafe Club", description="Best cafÃ© in town", member_max=5),
                models.Club(club_name="Clean Club", description="Nothing to fix", member_max=5),
                models.Event(
                    club_name="Cafe Club",
                    title="Itâ€™s open",
                    description="",
                    start_date=datetime(2030, 1, 1),
                ),
                models.Notification(username="someone", message="Ã©tÃ© plans"),
            ]
        )
        session.commit()
    return factory


def test_repair_database_counts_changed_rows(tmp_path):
    factory = _seeded_factory(f"sqlite:///{tmp_path / 'repair.db'}")
    with factory() as session:
        assert repair_database(session) == 3
        session.commit()

    with factory() as session:
        descriptions = {c.club_name: c.description for c in session.execute(select(models.Club)).scalars()}
        assert descriptions == {"Cafe Club": "Best café in town", "Clean Club": "Nothing to fix"}
        event = session.execute(select(models.Event)).scalar_one()
        assert event.title == "It’s open"


def test_main_reports_updated_rows(tmp_path, capsys):
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    _seeded_factory(url)
    assert main(["--database-url", url]) == 0
    assert "Updated rows: 3" in capsys.readouterr().out
