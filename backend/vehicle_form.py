"""
Formulaire véhicule de la demande de devis

Le formulaire conserve un VehicleRecord par session de demande de devis.
Il est modifié par la saisie directe et par l'application d'un aperçu de scan.
"""

from typing import Dict, Optional
import logging

from models import VehicleRecord, VEHICLE_FIELDS

logger = logging.getLogger(__name__)


def merge_vehicle_records(form: VehicleRecord, preview: VehicleRecord) -> VehicleRecord:
    """
    Fusion non destructive d'un aperçu de scan dans le formulaire.

    Un champ vide de l'aperçu signifie "pas d'avis": la valeur du formulaire
    est conservée. Appliquer deux fois le même aperçu donne le même résultat.
    """
    merged = form.copy()
    for name in VEHICLE_FIELDS:
        value = getattr(preview, name)
        if value.strip():
            setattr(merged, name, value)
    return merged


class QuoteVehicleForm:
    """Données véhicule d'une demande de devis en cours"""

    def __init__(self, record: Optional[VehicleRecord] = None):
        self.record = record.copy() if record is not None else VehicleRecord()

    def update_field(self, name: str, value: str) -> None:
        if name not in VEHICLE_FIELDS:
            raise KeyError(f"Champ véhicule inconnu: {name}")
        setattr(self.record, name, value)

    def apply_scan(self, preview: VehicleRecord) -> VehicleRecord:
        before = set(self.record.filled_fields())
        self.record = merge_vehicle_records(self.record, preview)
        logger.info(
            f"Scan appliqué: {len(preview.filled_fields())} champ(s) proposés, "
            f"{len(set(self.record.filled_fields()) - before)} nouveau(x)"
        )
        return self.record

    def filled_count(self) -> int:
        """Nombre de champs renseignés ("n/8 champs renseignés")"""
        return len(self.record.filled_fields())

    def to_vehicle_info(self) -> Optional[Dict[str, str]]:
        """
        Payload 'vehicleInfo' de la demande de devis:
        valeurs trimées non vides uniquement, None si rien n'est renseigné.
        """
        vehicle_info = {}
        for name in VEHICLE_FIELDS:
            value = getattr(self.record, name).strip()
            if value:
                vehicle_info[name] = value
        return vehicle_info or None

    def reset(self) -> None:
        self.record = VehicleRecord()
