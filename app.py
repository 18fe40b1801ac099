from flask import Flask
from src.database.firebase import initialize_firebase, FirestoreRecordStore
from src.database.memory import InMemoryRecordStore
from src.security.auth import verify_firebase_token
from src.security.binding_registry import BindingRegistry
from src.security.claim_binder import ClaimBinder
from src.security.heartbeat import HeartbeatProcessor
from src.security.streak import StreakEvaluator
from src.utils.clock import SystemClock
from src.web.routes import configure_routes
from config import config
import logging

logger = logging.getLogger(__name__)

def create_store(clock):
    """Build the record store selected by configuration"""
    if config.STORE_BACKEND == 'memory':
        logger.warning("Using in-memory record store; state is lost on restart")
        return InMemoryRecordStore(clock=clock)

    if not initialize_firebase(config.FIREBASE_CREDS, config.FIREBASE_PROJECT_ID):
        raise RuntimeError("Firebase initialization failed")
    return FirestoreRecordStore()

def create_app(store=None, clock=None, token_verifier=None, require_auth=None):
    """Application factory pattern"""
    app = Flask(__name__)
    app.secret_key = config.SECRET_KEY

    clock = clock or SystemClock()
    if store is None:
        store = create_store(clock)

    if token_verifier is None:
        def token_verifier(token):
            return verify_firebase_token(token, check_revoked=config.CHECK_REVOKED_TOKENS)

    registry = BindingRegistry(store)
    evaluator = StreakEvaluator(store, clock=clock, streak_days=config.STREAK_LENGTH_DAYS)

    app.extensions['tester_verification'] = {
        'store': store,
        'registry': registry,
        'evaluator': evaluator,
        'claims': ClaimBinder(store, registry, clock=clock),
        'heartbeat': HeartbeatProcessor(store, registry, evaluator, clock=clock),
        'token_verifier': token_verifier,
        'require_auth': config.REQUIRE_AUTH if require_auth is None else require_auth
    }

    configure_routes(app)

    return app
