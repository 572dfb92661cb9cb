"""
Client HTTP de l'API MyJantes (service de reconnaissance carte grise)

- SessionStore: cookie de session possédé explicitement par l'application
  (créé au démarrage, vidé à la déconnexion) et injecté dans le client
- ApiClient: appels requests + extraction du message d'erreur
- OcrApi: envoi multipart de l'image vers le endpoint de scan
"""

import asyncio
from typing import Any, Dict, Optional
import logging

import requests

from config import API_BASE, API_TIMEOUT, OCR_SCAN_ENDPOINT

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Erreur transport ou réponse non-2xx de l'API"""

    def __init__(self, status: Optional[int], message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class SessionStore:
    """Cookie de session de l'utilisateur connecté"""

    def __init__(self, cookie: Optional[str] = None):
        self.cookie = cookie

    def update(self, set_cookie: Optional[str]) -> None:
        if set_cookie:
            self.cookie = set_cookie

    def clear(self) -> None:
        self.cookie = None


def extract_error_message(response: requests.Response) -> str:
    """Message d'erreur: JSON message/error, sinon texte (200 car.), sinon 'Erreur <status>'"""
    message = f"Erreur {response.status_code}"
    text = response.text or ""
    try:
        error_data = response.json()
    except ValueError:
        return text[:200] if text else message

    if isinstance(error_data, dict):
        return error_data.get("message") or error_data.get("error") or message
    return message


class ApiClient:
    def __init__(self, session_store: SessionStore, base_url: str = API_BASE, timeout: float = API_TIMEOUT):
        self.session_store = session_store
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def api_call(
        self,
        endpoint: str,
        method: str = "GET",
        json: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = {}
        if self.session_store.cookie:
            headers["Cookie"] = self.session_store.cookie

        url = f"{self.base_url}{endpoint}"
        try:
            response = requests.request(
                method,
                url,
                headers=headers,
                json=json,
                files=files,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {endpoint}: {e}")
            raise ApiError(None, "Impossible de joindre le serveur. Vérifiez votre connexion.") from e

        self.session_store.update(response.headers.get("set-cookie"))

        if not response.ok:
            message = extract_error_message(response)
            logger.warning(f"{method} {endpoint} → {response.status_code}: {message}")
            raise ApiError(response.status_code, message)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning(f"{method} {endpoint}: réponse non JSON ignorée")
            return None


class OcrApi:
    """Service de reconnaissance carte grise"""

    def __init__(self, client: ApiClient, endpoint: str = OCR_SCAN_ENDPOINT):
        self.client = client
        self.endpoint = endpoint

    def scan_sync(self, image: bytes, filename: str, mime_type: str = "image/jpeg") -> Any:
        logger.info(f"Envoi scan carte grise: {filename} ({len(image) / 1024:.1f}KB)")
        return self.client.api_call(
            self.endpoint,
            method="POST",
            files={"media": (filename, image, mime_type)},
        )

    async def scan(self, image: bytes, filename: str, mime_type: str = "image/jpeg") -> Any:
        return await asyncio.to_thread(self.scan_sync, image, filename, mime_type)
