"""Flask extension singletons.

Instantiated here and initialized with the app in the factory
to avoid circular imports.
"""

from contextlib import contextmanager

from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
migrate = Migrate()


@contextmanager
def transaction():
    """Run a block of writes as one unit: commit on success, roll back on error."""
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
