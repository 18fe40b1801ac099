import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core.exceptions import GoogleAPICallError
import logging
from src.database.store import RecordStore, Increment, ArrayUnion, SERVER_TIMESTAMP

logger = logging.getLogger(__name__)

# Initialize Firebase app
firebase_app = None
db = None

def initialize_firebase(firebase_creds, project_id=None):
    global firebase_app, db
    try:
        # Handle credentials: service account dict or path to the JSON file
        if firebase_creds:
            cred = credentials.Certificate(firebase_creds)
        else:
            cred = credentials.ApplicationDefault()

        app_config = {'projectId': project_id} if project_id else {}

        firebase_app = firebase_admin.initialize_app(cred, app_config)
        db = firestore.client()

        logger.info("Firebase initialized successfully")
        return True
    except (ValueError, IOError) as e:
        logger.error(f"Firebase initialization failed: {str(e)}")
        return False

def get_firestore_db():
    global db
    return db


def _to_firestore(value):
    """Translate store transforms into their Firestore sentinels"""
    if isinstance(value, Increment):
        return firestore.Increment(value.amount)
    if isinstance(value, ArrayUnion):
        return firestore.ArrayUnion(value.values)
    if value is SERVER_TIMESTAMP:
        return firestore.SERVER_TIMESTAMP
    if isinstance(value, dict):
        return {k: _to_firestore(v) for k, v in value.items()}
    return value


class FirestoreRecordStore(RecordStore):
    """Record store backed by Cloud Firestore.

    Merge writes map onto ``set(..., merge=True)`` so increments, array unions
    and server timestamps are applied by Firestore itself.
    """

    def __init__(self, client=None):
        self.db = client or get_firestore_db()
        if self.db is None:
            raise RuntimeError("Firestore client not initialized")

    def read(self, path):
        try:
            doc = self.db.document(path).get()
            return doc.to_dict() if doc.exists else None
        except GoogleAPICallError as e:
            logger.error(f"Error reading {path}: {str(e)}")
            raise

    def merge_write(self, path, fields):
        try:
            self.db.document(path).set(_to_firestore(fields), merge=True)
        except GoogleAPICallError as e:
            logger.error(f"Error writing {path}: {str(e)}")
            raise

    def query(self, collection, order_by=None, descending=False, limit=None):
        try:
            query = self.db.collection(collection)
            if order_by:
                direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
                query = query.order_by(order_by, direction=direction)
            if limit:
                query = query.limit(limit)
            return [(doc.id, doc.to_dict()) for doc in query.stream()]
        except GoogleAPICallError as e:
            logger.error(f"Error querying {collection}: {str(e)}")
            raise
