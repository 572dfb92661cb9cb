"""
Scan carte grise - Aperçu et confirmation

États:
    IDLE → SCANNING → PREVIEW_READY → (apply / cancel) → IDLE
                    → NO_DATA_DETECTED → (dismiss ou nouveau scan) → IDLE
                    → IDLE (échec réseau / service, erreur réessayable)

Un seul scan en cours par session de formulaire: un second déclenchement
pendant SCANNING est ignoré (pas de second appel de reconnaissance).
"""

import asyncio
from enum import Enum
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import logging

from models import VehicleRecord, VEHICLE_FIELDS
from parser import reconcile_carte_grise
from validation import check_vehicle_record
from vehicle_form import QuoteVehicleForm
from api_client import ApiError

logger = logging.getLogger(__name__)


NO_DATA_TITLE = "Scan incomplet"
NO_DATA_MESSAGE = (
    "Aucune information n'a pu être extraite de l'image. Veuillez réessayer avec une photo "
    "plus nette de votre carte grise, ou remplir les champs manuellement."
)
SCAN_ERROR_TITLE = "Erreur de scan"
SCAN_ERROR_MESSAGE = "Impossible de scanner le document."


class ScanState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    PREVIEW_READY = "preview_ready"
    NO_DATA_DETECTED = "no_data_detected"


class ScanFlowError(Exception):
    """Transition invalide (ex: apply sans aperçu)"""


def scan_filename(uri: Optional[str] = None) -> str:
    """Nom de fichier depuis l'URI du sélecteur d'image, sinon scan_<timestamp>.jpg"""
    name = (uri or "").rstrip("/").split("/")[-1]
    return name or f"scan_{int(datetime.utcnow().timestamp() * 1000)}.jpg"


class ScanSession:
    """
    Flux de scan pour un formulaire de demande de devis.

    recognizer: objet exposant `async scan(image, filename, mime_type)`
    et retournant la réponse brute du service de reconnaissance.
    """

    def __init__(self, recognizer: Any, form: QuoteVehicleForm):
        self.recognizer = recognizer
        self.form = form
        self.state = ScanState.IDLE
        self.preview: Optional[VehicleRecord] = None
        self.preview_sources: Dict[str, str] = {}
        self.preview_hints: List[str] = []
        self.scanned_filename: Optional[str] = None
        self.last_error: Optional[str] = None
        self.message: Optional[str] = None

    @property
    def is_scanning(self) -> bool:
        return self.state == ScanState.SCANNING

    async def scan(self, image: bytes, filename: Optional[str] = None, mime_type: str = "image/jpeg") -> ScanState:
        if self.state == ScanState.SCANNING:
            logger.info("Scan déjà en cours, demande ignorée")
            return self.state
        if self.state == ScanState.PREVIEW_READY:
            logger.info("Aperçu en attente de confirmation, demande ignorée")
            return self.state

        self.state = ScanState.SCANNING
        self.last_error = None
        self.message = None
        self.scanned_filename = filename or scan_filename()

        try:
            raw = await self.recognizer.scan(image, self.scanned_filename, mime_type)
        except ApiError as e:
            logger.error(f"Erreur de scan ({e.status}): {e.message}")
            self.last_error = e.message or SCAN_ERROR_MESSAGE
            self.state = ScanState.IDLE
            return self.state
        except Exception as e:
            logger.exception(f"Erreur de scan: {e}")
            self.last_error = SCAN_ERROR_MESSAGE
            self.state = ScanState.IDLE
            return self.state
        except asyncio.CancelledError:
            self.state = ScanState.IDLE
            raise

        record, sources = reconcile_carte_grise(raw)

        if record.is_empty():
            self.message = NO_DATA_MESSAGE
            self.state = ScanState.NO_DATA_DETECTED
            return self.state

        self.preview = record
        self.preview_sources = sources
        self.preview_hints = check_vehicle_record(record)
        self.state = ScanState.PREVIEW_READY
        return self.state

    def alert(self) -> Optional[Tuple[str, str]]:
        """Titre et message à afficher à l'utilisateur après un scan"""
        if self.last_error:
            return SCAN_ERROR_TITLE, self.last_error
        if self.state == ScanState.NO_DATA_DETECTED:
            return NO_DATA_TITLE, self.message
        return None

    def edit_preview(self, name: str, value: str) -> None:
        """Correction manuelle d'un champ de l'aperçu (aucune validation)"""
        if self.state != ScanState.PREVIEW_READY:
            raise ScanFlowError("Aucun aperçu à modifier")
        if name not in VEHICLE_FIELDS:
            raise KeyError(f"Champ véhicule inconnu: {name}")
        setattr(self.preview, name, value)

    def apply(self) -> VehicleRecord:
        if self.state != ScanState.PREVIEW_READY:
            raise ScanFlowError("Aucun aperçu à appliquer")
        record = self.form.apply_scan(self.preview)
        self._clear_preview()
        return record

    def cancel(self) -> None:
        if self.state != ScanState.PREVIEW_READY:
            raise ScanFlowError("Aucun aperçu à annuler")
        logger.info("Aperçu du scan annulé")
        self._clear_preview()

    def dismiss(self) -> None:
        """Fermeture du message 'Scan incomplet'"""
        if self.state != ScanState.NO_DATA_DETECTED:
            raise ScanFlowError("Aucun message à fermer")
        self.message = None
        self.state = ScanState.IDLE

    def _clear_preview(self) -> None:
        self.preview = None
        self.preview_sources = {}
        self.preview_hints = []
        self.state = ScanState.IDLE
