"""Create the database tables and indexes.

Usage:
    python -m emargement.init_db
"""
import sys

from sqlalchemy.exc import SQLAlchemyError

from emargement.database import Base, engine, ensure_attendance_schema
from emargement.models import attendance, training_session, user  # noqa: F401


def main() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_attendance_schema(bind=engine)
    except SQLAlchemyError as exc:
        print(f"Database initialization failed: {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"Schema ready on {engine.url.render_as_string(hide_password=True)}")


if __name__ == "__main__":
    main()
