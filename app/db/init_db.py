# app/db/init_db.py
"""Table creation"""
import logging

from app.db.base import Base, engine

logger = logging.getLogger(__name__)


def import_models():
    """Import every model module so relationships resolve by name"""
    import app.db.models.organization  # noqa: F401
    import app.db.models.professional  # noqa: F401
    import app.db.models.service  # noqa: F401
    import app.db.models.client  # noqa: F401
    import app.db.models.availability  # noqa: F401
    import app.db.models.appointment  # noqa: F401


def init_db(bind=None):
    import_models()
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")
