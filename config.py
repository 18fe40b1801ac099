# config.py
import os
import json
import base64
import binascii
from dotenv import load_dotenv
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()

class Config:

    def __init__(self):
        # Core configuration
        self.ENV = os.getenv('ENV', 'production')
        self.PORT = int(os.getenv('PORT', 10000))
        self.SECRET_KEY = os.getenv('SECRET_KEY', 'your_secret_key_here')
        self.WEB_WORKERS = int(os.getenv('WEB_WORKERS', 4))

        # Firebase configuration
        self.FIREBASE_PROJECT_ID = os.getenv('FIREBASE_PROJECT_ID')
        self.FIREBASE_CREDS = self.parse_firebase_credentials(os.getenv('FIREBASE_CREDENTIALS'))

        # Record store backend: 'firestore' in deployments, 'memory' for local runs
        self.STORE_BACKEND = os.getenv('STORE_BACKEND', 'firestore').lower()

        # Authentication
        self.REQUIRE_AUTH = os.getenv('REQUIRE_AUTH', 'true').lower() == 'true'
        self.CHECK_REVOKED_TOKENS = os.getenv('CHECK_REVOKED_TOKENS', 'false').lower() == 'true'

        # Engagement verification
        self.STREAK_LENGTH_DAYS = int(os.getenv('STREAK_LENGTH_DAYS', 14))

        # Logging
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_FILE = os.getenv("LOG_FILE", "logs/app.log")

        # Log configuration status
        self.log_config_summary()

    def parse_firebase_credentials(self, raw):
        """Service account from a JSON string, base64-encoded JSON, or a file path"""
        if not raw:
            return None

        raw = raw.strip()
        if raw.startswith('{'):
            try:
                return json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("FIREBASE_CREDENTIALS is not valid JSON")
                return None

        if os.path.exists(raw):
            return raw

        try:
            decoded = base64.b64decode(self.fix_base64_padding(raw)).decode('utf-8')
            return json.loads(decoded)
        except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("FIREBASE_CREDENTIALS is neither JSON, base64 JSON nor a file path")
            return None

    def fix_base64_padding(self, value):
        """Ensure base64 string has correct padding"""
        value = value.strip()
        pad_length = 4 - (len(value) % 4)
        if pad_length == 4:
            return value
        return value + ('=' * pad_length)

    def log_config_summary(self):
        """Log a secure summary of the configuration"""
        logger.info("Configuration Summary:")
        logger.info(f"Environment: {self.ENV}")
        logger.info(f"Store Backend: {self.STORE_BACKEND}")
        logger.info(f"Auth Required: {self.REQUIRE_AUTH} (revocation checks: {self.CHECK_REVOKED_TOKENS})")
        logger.info(f"Streak Length: {self.STREAK_LENGTH_DAYS} days")

        if isinstance(self.FIREBASE_CREDS, dict):
            client_email = self.FIREBASE_CREDS.get('client_email', '')
            logger.info(f"Firebase Service Account: {self.secure_mask(client_email)}")
        elif self.FIREBASE_CREDS:
            logger.info(f"Firebase Credentials File: {self.FIREBASE_CREDS}")
        else:
            logger.warning("Firebase credentials not configured, using application default credentials")

    def secure_mask(self, value, show_first=6, show_last=4):
        """Mask sensitive information for logging"""
        if not value or len(value) < (show_first + show_last):
            return "[REDACTED]"
        return f"{value[:show_first]}...{value[-show_last:]}"

# Create singleton instance
config = Config()
