"""
Shared Gmail authentication utilities.
Loads the OAuth client config and the cached token from env or local files.
"""

import json
import logging
import os
from typing import Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

logger = logging.getLogger(__name__)

DEFAULT_SCOPES = ["https://www.googleapis.com/auth/gmail.modify"]
DEFAULT_TOKEN_FILE = "token.json"
DEFAULT_CREDENTIALS_FILE = "credentials.json"


def _load_json(env_var: str, path: str) -> Optional[dict]:
    raw = os.getenv(env_var)
    source = env_var
    if not raw:
        if not os.path.exists(path):
            return None
        with open(path, "r") as f:
            raw = f.read()
        source = path
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Invalid JSON in {source}.") from exc


def load_client_config(credentials_file: Optional[str] = None) -> dict:
    config = _load_json("GMAIL_OAUTH_JSON", credentials_file or DEFAULT_CREDENTIALS_FILE)
    if not config:
        raise RuntimeError(
            "Missing Gmail OAuth client config. "
            "Set GMAIL_OAUTH_JSON or place credentials.json next to the script."
        )
    if "installed" not in config and "web" not in config:
        raise RuntimeError("OAuth client config must contain an 'installed' or 'web' section.")
    return config


def load_token_info(token_file: Optional[str] = None) -> Optional[dict]:
    try:
        return _load_json("GMAIL_TOKEN_JSON", token_file or DEFAULT_TOKEN_FILE)
    except RuntimeError as exc:
        logger.warning(f"Ignoring cached token: {exc}")
        return None


def store_token_info(creds: Credentials, token_file: Optional[str] = None) -> None:
    path = token_file or DEFAULT_TOKEN_FILE
    with open(path, "w") as f:
        f.write(creds.to_json())
    logger.info(f"Saved OAuth token to {path}")


def get_credentials(
    scopes: Optional[list] = None,
    token_file: Optional[str] = None,
    credentials_file: Optional[str] = None,
) -> Credentials:
    scopes = scopes or DEFAULT_SCOPES
    token_info = load_token_info(token_file)
    creds = None
    if token_info:
        creds = Credentials.from_authorized_user_info(token_info, scopes=scopes)

    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            creds.refresh(Request())
            store_token_info(creds, token_file)
        else:
            client_config = load_client_config(credentials_file)
            flow = InstalledAppFlow.from_client_config(client_config, scopes)
            creds = flow.run_local_server(port=0)
            store_token_info(creds, token_file)

    return creds


def build_gmail_service(
    scopes: Optional[list] = None,
    token_file: Optional[str] = None,
    credentials_file: Optional[str] = None,
):
    creds = get_credentials(
        scopes=scopes,
        token_file=token_file,
        credentials_file=credentials_file,
    )
    return build("gmail", "v1", credentials=creds)
