from __future__ import annotations

"""
Google Drive Backend.

Talks to the Drive v3 REST API with requests. Authentication follows the
OAuth2 installed-application flow: client secrets come from the configured
credentials file, the resulting token is cached next to it and refreshed
when it expires. Folders are listed by parent id with page tokens; files
are addressed by path and resolved to ids one segment at a time.
"""

import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import requests

from superscan.domain.errors import BackendUnavailable, LocalIOError, NotFound
from superscan.domain.tree_models import ListingEntry
from superscan.infra.fs import write_private_file
from superscan.infra.network.common import CHUNK_SIZE, DEFAULT_TIMEOUT, USER_AGENT
from superscan.infra.sources.base import Source

logger = logging.getLogger(__name__)

DRIVE_API_URL = "https://www.googleapis.com/drive/v3/files"
DRIVE_READONLY_SCOPE = "https://www.googleapis.com/auth/drive.readonly"
DEFAULT_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"
DEFAULT_REDIRECT_URI = "http://localhost"

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
ROOT_FOLDER_ID = "root"
PAGE_SIZE = 1000

# Seconds of validity under which a token is refreshed ahead of use
_EXPIRY_MARGIN = 60


class GoogleDriveSource(Source):
    """Source backed by the authenticated user's Google Drive."""

    name = "google-drive"
    description = "Google Drive Storage"

    def __init__(
            self,
            credentials_file: str = "",
            token_file: str = "",
            session: Optional[requests.Session] = None,
            prompt: Callable[[str], str] = input,
    ) -> None:
        """
        Args:
            credentials_file: OAuth client secrets JSON downloaded from Google.
            token_file: Cache for the user token.
            session: Pre-authorized session; skips the OAuth flow when given.
            prompt: Reads the authorization code during the interactive flow.
        """
        self.credentials_file = credentials_file
        self.token_file = token_file
        self._session = session
        self._prompt = prompt
        self._token: Dict[str, Any] = {}
        self._client: Dict[str, Any] = {}
        # (parent folder id, name) -> file id
        self._id_cache: Dict[Tuple[str, str], str] = {}

    # -------------------------------------------------------------------------
    # Source API
    # -------------------------------------------------------------------------

    def source_base(self, path: str) -> str:
        base = super().source_base(path)
        return "" if base == ROOT_FOLDER_ID else base

    def resolve_root(self, path: str) -> Tuple[str, str]:
        base = self.source_base(path)
        if not base:
            return ROOT_FOLDER_ID, ROOT_FOLDER_ID
        segments = base.split("/")
        return self._resolve_path(segments, folders_only=True), segments[-1]

    def list_entries(self, identifier: str) -> List[ListingEntry]:
        entries: List[ListingEntry] = []
        params: Dict[str, Any] = {
            "q": f"'{_escape(identifier)}' in parents and trashed = false",
            "fields": "nextPageToken, files(id, name, mimeType, size)",
            "pageSize": PAGE_SIZE,
        }

        while True:
            data = self._get_json(DRIVE_API_URL, params)
            for item in data.get("files", []):
                is_dir = item.get("mimeType") == FOLDER_MIME_TYPE
                entries.append(ListingEntry(
                    name=item["name"],
                    is_dir=is_dir,
                    # Native Google Docs report no size
                    size=0 if is_dir else int(item.get("size") or 0),
                    identifier=item["id"],
                ))
                self._id_cache[(identifier, item["name"])] = item["id"]

            page_token = data.get("nextPageToken")
            if not page_token:
                return entries
            params["pageToken"] = page_token

    def download_file(self, source_path: str, destination_path: str) -> None:
        segments = [s for s in source_path.replace("\\", "/").split("/") if s]
        if not segments:
            raise NotFound("Empty file path")
        file_id = self._resolve_path(segments, folders_only=False)

        response = self._request(f"{DRIVE_API_URL}/{file_id}", {"alt": "media"}, stream=True)
        with response:
            try:
                with open(destination_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
            except OSError as e:
                raise LocalIOError(f"Failed to write {destination_path}: {e}") from e
            except requests.exceptions.RequestException as e:
                raise BackendUnavailable(f"Failed to download {source_path}: {e}") from e

        logger.debug(f"Successfully downloaded {source_path} to {destination_path}")

    # -------------------------------------------------------------------------
    # Path resolution
    # -------------------------------------------------------------------------

    def _resolve_path(self, segments: List[str], folders_only: bool) -> str:
        """Walk name segments from the Drive root down to an id."""
        current = ROOT_FOLDER_ID
        last = len(segments) - 1
        for i, segment in enumerate(segments):
            folder = folders_only or i < last
            current = self._find_child(current, segment, folder)
        return current

    def _find_child(self, parent_id: str, name: str, folder: bool) -> str:
        cached = self._id_cache.get((parent_id, name))
        if cached:
            return cached

        query = f"name = '{_escape(name)}' and '{_escape(parent_id)}' in parents and trashed = false"
        if folder:
            query += f" and mimeType = '{FOLDER_MIME_TYPE}'"

        data = self._get_json(DRIVE_API_URL, {"q": query, "fields": "files(id, name)"})
        files = data.get("files", [])
        if not files:
            kind = "Folder" if folder else "File"
            raise NotFound(f"{kind} not found: {name}")

        file_id = files[0]["id"]
        self._id_cache[(parent_id, name)] = file_id
        return file_id

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    def _get_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        response = self._request(url, params)
        try:
            return response.json()
        except ValueError as e:
            raise BackendUnavailable(f"Invalid response from Google Drive: {e}") from e

    def _request(self, url: str, params: Dict[str, Any], stream: bool = False) -> requests.Response:
        session = self._get_session()
        try:
            response = session.get(url, params=params, stream=stream, timeout=DEFAULT_TIMEOUT)
            if response.status_code == 401 and self._token.get("refresh_token"):
                logger.info("Access token rejected, refreshing")
                self._refresh_token()
                response = session.get(url, params=params, stream=stream, timeout=DEFAULT_TIMEOUT)
        except requests.exceptions.RequestException as e:
            raise BackendUnavailable(f"Google Drive communication failure: {e}") from e

        if response.status_code == 404:
            raise NotFound(f"Google Drive returned 404 for {url}")
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise BackendUnavailable(f"Google Drive request failed: {e}") from e
        return response

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._authenticate()
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
            self._session = session
            self._apply_token()
        elif self._token and self._token_expired():
            self._refresh_token()
        return self._session

    # -------------------------------------------------------------------------
    # OAuth2
    # -------------------------------------------------------------------------

    def _authenticate(self) -> None:
        self._client = load_client_secrets(self.credentials_file)
        token = load_token(self.token_file)
        if token is None:
            logger.info("Token not found in file, requesting new token")
            token = self._token_from_web()
            self._token = token
            self._save_token()
            logger.info("New token saved to file")
            return

        logger.debug("Successfully loaded token from file")
        self._token = token
        if self._token_expired():
            self._refresh_token()

    def _token_from_web(self) -> Dict[str, Any]:
        auth_url = build_auth_url(self._client)
        print(f"Go to the following link in your browser then type the authorization code:\n{auth_url}")
        code = self._prompt("Authorization code: ").strip()
        if not code:
            raise BackendUnavailable("No authorization code provided")

        return self._post_token({
            "code": code,
            "client_id": self._client["client_id"],
            "client_secret": self._client["client_secret"],
            "redirect_uri": self._client.get("redirect_uri", DEFAULT_REDIRECT_URI),
            "grant_type": "authorization_code",
        })

    def _refresh_token(self) -> None:
        refresh = self._token.get("refresh_token")
        if not refresh or not self._client:
            raise BackendUnavailable("Access token expired and cannot be refreshed")

        fresh = self._post_token({
            "refresh_token": refresh,
            "client_id": self._client["client_id"],
            "client_secret": self._client["client_secret"],
            "grant_type": "refresh_token",
        })
        # Google omits the refresh token on refresh responses
        fresh.setdefault("refresh_token", refresh)
        self._token = fresh
        self._save_token()
        self._apply_token()

    def _post_token(self, payload: Dict[str, str]) -> Dict[str, Any]:
        token_uri = self._client.get("token_uri", DEFAULT_TOKEN_URI)
        try:
            response = requests.post(
                token_uri,
                data=payload,
                headers={"User-Agent": USER_AGENT},
                timeout=DEFAULT_TIMEOUT,
            )
            response.raise_for_status()
            token = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise BackendUnavailable(f"Unable to retrieve token: {e}") from e

        if "access_token" not in token:
            raise BackendUnavailable("Token endpoint returned no access token")
        token["expiry"] = time.time() + float(token.get("expires_in", 3600))
        return token

    def _token_expired(self) -> bool:
        expiry = self._token.get("expiry")
        return bool(expiry) and float(expiry) - _EXPIRY_MARGIN <= time.time()

    def _apply_token(self) -> None:
        if self._session is not None and self._token:
            self._session.headers["Authorization"] = f"Bearer {self._token['access_token']}"

    def _save_token(self) -> None:
        if not self.token_file:
            return
        logger.info(f"Saving credential file to: {self.token_file}")
        try:
            write_private_file(self.token_file, json.dumps(self._token))
        except OSError as e:
            logger.error(f"Unable to cache oauth token: {e}")

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def load_client_secrets(path: str) -> Dict[str, Any]:
    """
    Read an OAuth client secrets file ('installed' or 'web' application).

    Raises:
        BackendUnavailable: The file is missing or malformed.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise BackendUnavailable(f"Unable to read credentials file '{path}': {e}") from e

    client = data.get("installed") or data.get("web") or data
    if not isinstance(client, dict) or "client_id" not in client or "client_secret" not in client:
        raise BackendUnavailable(f"Unable to parse client secret file '{path}'")

    redirect_uris = client.get("redirect_uris") or []
    if redirect_uris and "redirect_uri" not in client:
        client["redirect_uri"] = redirect_uris[0]
    return client


def load_token(path: str) -> Optional[Dict[str, Any]]:
    """Read a cached token, returning None when absent or unreadable."""
    if not path:
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            token = json.load(f)
    except (OSError, ValueError):
        return None
    if not isinstance(token, dict) or "access_token" not in token:
        return None
    return token


def build_auth_url(client: Dict[str, Any]) -> str:
    params = {
        "client_id": client["client_id"],
        "redirect_uri": client.get("redirect_uri", DEFAULT_REDIRECT_URI),
        "response_type": "code",
        "scope": DRIVE_READONLY_SCOPE,
        "access_type": "offline",
        "state": "state-token",
    }
    return f"{client.get('auth_uri', DEFAULT_AUTH_URI)}?{urlencode(params)}"


def _escape(value: str) -> str:
    """Escape a literal for use inside a Drive query string."""
    return value.replace("\\", "\\\\").replace("'", "\\'")
