import os
import logging
from pathlib import Path

import firebase_admin
from firebase_admin import credentials, auth

logger = logging.getLogger(__name__)

REQUIRED_CREDENTIAL_FIELDS = ["project_id", "private_key", "client_email"]


def _load_private_key() -> str:
    """Read FIREBASE_PRIVATE_KEY, undoing the quoting/escaping .env files add."""
    private_key_raw = os.getenv("FIREBASE_PRIVATE_KEY", "")
    if not private_key_raw:
        return ""
    private_key_raw = private_key_raw.strip()
    # Remove surrounding quotes if present
    if (private_key_raw.startswith('"') and private_key_raw.endswith('"')) or \
       (private_key_raw.startswith("'") and private_key_raw.endswith("'")):
        private_key_raw = private_key_raw[1:-1]
    # Replace escaped newlines with actual newlines
    return private_key_raw.replace("\\n", "\n")


def build_credentials_from_env() -> dict:
    return {
        "type": os.getenv("FIREBASE_TYPE", "service_account"),
        "project_id": os.getenv("FIREBASE_PROJECT_ID"),
        "private_key_id": os.getenv("FIREBASE_PRIVATE_KEY_ID"),
        "private_key": _load_private_key(),
        "client_email": os.getenv("FIREBASE_CLIENT_EMAIL"),
        "client_id": os.getenv("FIREBASE_CLIENT_ID"),
        "auth_uri": os.getenv("FIREBASE_AUTH_URI", "https://accounts.google.com/o/oauth2/auth"),
        "token_uri": os.getenv("FIREBASE_TOKEN_URI", "https://oauth2.googleapis.com/token"),
        "auth_provider_x509_cert_url": os.getenv("FIREBASE_AUTH_PROVIDER_X509_CERT_URL", "https://www.googleapis.com/oauth2/v1/certs"),
        "client_x509_cert_url": os.getenv("FIREBASE_CLIENT_X509_CERT_URL"),
        "universe_domain": os.getenv("FIREBASE_UNIVERSE_DOMAIN", "googleapis.com"),
    }


def initialize_firebase() -> None:
    """Initialize the Firebase Admin SDK once per process.

    Credentials come from the FIREBASE_* environment variables when they are
    all set, otherwise from the service account file named by
    FIREBASE_CREDENTIALS (relative paths resolve against the backend
    directory).

    Raises:
        FileNotFoundError: FIREBASE_CREDENTIALS points to a missing file
        ValueError: No usable credentials are configured
    """
    if firebase_admin._apps:
        return

    firebase_credentials = build_credentials_from_env()
    missing_fields = [field for field in REQUIRED_CREDENTIAL_FIELDS if not firebase_credentials.get(field)]

    if not missing_fields:
        firebase_admin.initialize_app(credentials.Certificate(firebase_credentials))
        logger.info(f"[FIREBASE] Initialized from environment for project {firebase_credentials['project_id']}")
        return

    service_account_path = os.getenv("FIREBASE_CREDENTIALS")
    if not service_account_path:
        raise ValueError(
            f"Firebase credentials are missing. Please set FIREBASE_CREDENTIALS (file path) "
            f"or set all required FIREBASE_* environment variables. Missing fields: {missing_fields}"
        )

    path = Path(service_account_path)
    if not path.is_absolute():
        backend_dir = Path(__file__).parent.parent.parent
        path = backend_dir / path

    if not path.exists():
        raise FileNotFoundError(
            f"Firebase service account file not found: {path}. "
            f"Please check that the file exists or set all FIREBASE_* environment variables."
        )

    firebase_admin.initialize_app(credentials.Certificate(str(path)))
    logger.info(f"[FIREBASE] Initialized from service account file {path}")


def get_firebase_auth():
    """Get Firebase Auth instance for verifying user identity tokens.

    Example usage:
        auth_service = get_firebase_auth()
        decoded_token = auth_service.verify_id_token(id_token)

    Returns:
        firebase_admin.auth: Firebase Auth module
    """
    return auth
