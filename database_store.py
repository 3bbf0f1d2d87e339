"""
Database-backed roster store for the bus management system.
Provides the same get/put interface as the file store, plus best-effort
forwarding of committed changes into the database when the file store is primary.
"""

import logging
import threading

from sqlalchemy.exc import SQLAlchemyError

from data_store import BUSES, STUDENTS, TICKETS
from models import Bus, Student, Ticket

# Configure logging
logger = logging.getLogger(__name__)

COLLECTION_MODELS = {
    BUSES: Bus,
    STUDENTS: Student,
    TICKETS: Ticket,
}


def _model_for(collection):
    try:
        return COLLECTION_MODELS[collection]
    except KeyError:
        raise KeyError(f"Unknown roster collection: {collection}")


def _row_from_record(model, record, position=None):
    """Build a model instance from a roster dict, ignoring keys the table does not have"""
    values = {field: record.get(field) for field in model.FIELDS if field in record}
    if position is not None:
        values['position'] = position
    return model(**values)


class DatabaseRosterStore:
    """Whole-collection reads and writes against the SQLAlchemy tables"""

    def __init__(self, db):
        self.db = db
        self.lock = threading.RLock()

    def get(self, collection):
        model = _model_for(collection)
        rows = model.query.order_by(model.position).all()
        return [row.to_dict() for row in rows]

    def put(self, collection, records):
        """Replace the collection in a single transaction"""
        model = _model_for(collection)
        try:
            model.query.delete()
            for position, record in enumerate(records):
                self.db.session.add(_row_from_record(model, record, position))
            self.db.session.commit()
        except SQLAlchemyError:
            self.db.session.rollback()
            logger.exception(f"Failed to save {collection}")
            raise
        logger.debug(f"Saved {len(records)} {collection} to database")


def upsert_records(db, collection, records):
    """Insert or update roster records by primary key"""
    model = _model_for(collection)
    try:
        for record in records:
            db.session.merge(_row_from_record(model, record))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    logger.info(f"Mirrored {len(records)} {collection} to database")


def _forward(app, db, collection, records):
    with app.app_context():
        try:
            upsert_records(db, collection, records)
        except SQLAlchemyError as e:
            logger.error(f"Database mirror error ({collection}): {e}")


def forward_records(app, db, collection, records):
    """
    Copy committed buses or students to the database tables.

    Only runs when MIRROR_TO_DATABASE is set and the file store is primary.
    With MIRROR_ASYNC the copy happens on a daemon thread and the caller never
    waits for it. Returns the thread, if one was started.
    """
    if collection == TICKETS:
        return None
    if not app.config.get('MIRROR_TO_DATABASE') or app.config.get('ROSTER_BACKEND') == 'database':
        return None
    records = [dict(r) for r in records]
    if not records:
        return None

    if app.config.get('MIRROR_ASYNC', True):
        thread = threading.Thread(target=_forward, args=(app, db, collection, records), daemon=True)
        thread.start()
        return thread
    _forward(app, db, collection, records)
    return None
