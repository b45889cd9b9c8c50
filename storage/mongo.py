"""
MongoDB store: one document per body per computed instant.

Document shape:
    {name, mass, radius, position, velocity, timestamp, key, index}

`timestamp` is the precise instant (UTC string), `key`
the cache key used for lookup, `index` the body's position in the state
so reads restore the original order. A unique index on
(name, timestamp) rejects duplicate inserts of the same body/instant;
those rejections are expected under concurrent recomputation and are
logged, not raised.

IMPORTANT: No unicode in code or messages (Windows charmap).
"""

import logging

from pymongo import ASCENDING, MongoClient
from pymongo.errors import BulkWriteError, PyMongoError

from physics.body import Body
from storage import SimulationStore, StoreError

log = logging.getLogger(__name__)

DUPLICATE_KEY = 11000
INDEX_NAME = "name_timestamp_unique"


class MongoStore(SimulationStore):

    name = "mongo"

    def __init__(self, collection):
        self.collection = collection
        self._indexed = False

    @classmethod
    def connect(cls, uri, db_name, collection_name, timeout_ms=2000):
        """
        Build a store on a new client.

        The client connects lazily; an unreachable server surfaces as
        StoreError on the first find/save, not here.
        """
        client = MongoClient(uri, appname="celestia", serverSelectionTimeoutMS=timeout_ms)
        return cls(client[db_name][collection_name])

    def ensure_indexes(self):
        """Create the unique (name, timestamp) index once per store."""
        if self._indexed:
            return
        self.collection.create_index(
            [("name", ASCENDING), ("timestamp", ASCENDING)],
            unique=True,
            name=INDEX_NAME,
        )
        self._indexed = True
        log.info("Ensured index %s on collection %s", INDEX_NAME, self.collection.name)

    def find(self, key):
        """
        Load the state stored under `key`.

        A day key can hold documents of several instants when concurrent
        misses computed different instants of the same day. Only the
        first instant in timestamp order is returned. A state with missing
        or repeated indexes is treated as a miss.
        """
        try:
            docs = list(self.collection.find({"key": key}, {"_id": 0},
                                             sort=[("timestamp", ASCENDING), ("index", ASCENDING)]))
        except PyMongoError as e:
            raise StoreError("mongo find failed for key {}: {}".format(key, e))
        if not docs:
            return None
        instant = docs[0].get("timestamp")
        docs = [doc for doc in docs if doc.get("timestamp") == instant]
        if [doc.get("index") for doc in docs] != list(range(len(docs))):
            log.warning("Incomplete state in mongo: key=%s timestamp=%s documents=%d",
                        key, instant, len(docs))
            return None
        try:
            bodies = [Body.from_dict(doc) for doc in docs]
        except ValueError as e:
            raise StoreError("mongo returned malformed body for key {}: {}".format(key, e))
        log.info("Loaded state from mongo: key=%s timestamp=%s bodies=%d", key, instant, len(bodies))
        return bodies

    def save(self, key, bodies):
        if not bodies:
            return
        docs = []
        for index, body in enumerate(bodies):
            doc = body.to_dict()
            doc["key"] = key
            doc["index"] = index
            docs.append(doc)
        try:
            self.ensure_indexes()
            result = self.collection.insert_many(docs, ordered=False)
        except BulkWriteError as e:
            errors = e.details.get("writeErrors", [])
            others = [err for err in errors if err.get("code") != DUPLICATE_KEY]
            if others:
                raise StoreError("mongo insert failed for key {}: {}".format(key, others[0].get("errmsg")))
            log.warning("Mongo skipped %d duplicate bodies for key %s", len(errors), key)
            return
        except PyMongoError as e:
            raise StoreError("mongo insert failed for key {}: {}".format(key, e))
        log.info("Saved state to mongo: key=%s documents=%d", key, len(result.inserted_ids))
