"""
Firebase Admin credentials loading.

Two ways to supply the service account:
- FIREBASE_CREDENTIALS: the service-account JSON inline (minified, one line),
  so the .json file never has to live in the project.
- FIREBASE_PROJECT_ID + FIREBASE_CLIENT_EMAIL + FIREBASE_PRIVATE_KEY: the
  individual fields (private key with literal "\\n" sequences is accepted).
"""

import json
import logging
from typing import Optional

from firebase_admin import credentials

from quotes_api.core.config import Settings

logger = logging.getLogger(__name__)


def get_firebase_credentials(settings: Settings) -> Optional[credentials.Certificate]:
    """
    Returns a credentials.Certificate, or None when nothing usable is configured
    (callers then fall back to Application Default Credentials).
    """
    json_str = (settings.firebase_credentials or "").strip()
    if json_str:
        try:
            return credentials.Certificate(json.loads(json_str))
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"FIREBASE_CREDENTIALS: invalid service account JSON - {e}")
            return None

    if settings.firebase_project_id and settings.firebase_client_email and settings.firebase_private_key:
        try:
            return credentials.Certificate({
                "type": "service_account",
                "project_id": settings.firebase_project_id,
                "client_email": settings.firebase_client_email,
                "private_key": settings.firebase_private_key.replace("\\n", "\n"),
                "token_uri": "https://oauth2.googleapis.com/token",
            })
        except ValueError as e:
            logger.error(f"FIREBASE_* credentials rejected: {e}")
            return None

    return None
