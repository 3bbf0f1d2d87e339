"""
File-backed roster store for the bus management system.
Holds the bus fleet, permanent students and today's day-tickets, one JSON file per collection.
"""
import copy
import json
import logging
import os
import tempfile
import threading

logger = logging.getLogger(__name__)

BUSES = 'buses'
STUDENTS = 'students'
TICKETS = 'tickets'
COLLECTIONS = (BUSES, STUDENTS, TICKETS)

# Collection name -> file name inside the data directory
COLLECTION_FILES = {
    BUSES: 'buses.json',
    STUDENTS: 'students.json',
    TICKETS: 'temp_tickets.json',
}


def _check_collection(collection):
    if collection not in COLLECTIONS:
        raise KeyError(f"Unknown roster collection: {collection}")


class FileRosterStore:
    """Reads and replaces whole collections stored as JSON arrays"""

    def __init__(self, data_dir):
        self.data_dir = data_dir
        self.lock = threading.RLock()
        os.makedirs(data_dir, exist_ok=True)
        for collection in COLLECTIONS:
            path = self.path_for(collection)
            if not os.path.exists(path):
                with open(path, 'w') as f:
                    f.write('[]')

    def path_for(self, collection):
        _check_collection(collection)
        return os.path.join(self.data_dir, COLLECTION_FILES[collection])

    def get(self, collection):
        """Load a collection; a missing, empty or corrupt file reads as empty"""
        path = self.path_for(collection)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read().strip()
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.error(f"Error reading {path}: {e}")
            return []

        if not content:
            return []
        try:
            data = json.loads(content)
        except ValueError as e:
            logger.error(f"Corrupt roster file {path}: {e}")
            return []
        if not isinstance(data, list):
            logger.error(f"Roster file {path} does not hold a list")
            return []
        return data

    def put(self, collection, records):
        """Replace a collection; written to a temp file first so readers never see half a file"""
        path = self.path_for(collection)
        fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(list(records), f, indent=2)
            os.replace(tmp_path, path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.debug(f"Saved {len(records)} {collection} to {path}")


class MemoryRosterStore:
    """In-process roster store; hands out copies so callers cannot mutate stored state by accident"""

    def __init__(self, buses=None, students=None, tickets=None):
        self.lock = threading.RLock()
        self._data = {
            BUSES: copy.deepcopy(list(buses or [])),
            STUDENTS: copy.deepcopy(list(students or [])),
            TICKETS: copy.deepcopy(list(tickets or [])),
        }
        self.writes = 0

    def get(self, collection):
        _check_collection(collection)
        return copy.deepcopy(self._data[collection])

    def put(self, collection, records):
        _check_collection(collection)
        self._data[collection] = copy.deepcopy(list(records))
        self.writes += 1
