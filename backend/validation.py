"""
Validation Module - Indications qualité sur les données carte grise

Contrôles NON bloquants, affichés dans l'aperçu du scan:
- Immatriculation au format SIV (AA-123-AA) ou FNI (123 ABC 45)
- VIN sur 17 caractères (alphabet sans I, O, Q)
- Date / année de 1ère mise en circulation lisible

Aucune valeur n'est modifiée ici: l'utilisateur reste libre de corriger
ou d'appliquer tel quel.
"""

import re
from typing import List
import logging

from models import VehicleRecord, VEHICLE_FIELD_LABELS
from vin_utils import is_vin_format, suggest_vin_correction

logger = logging.getLogger(__name__)


# SIV (depuis 2009): AB-123-CD, séparateurs tolérés
SIV_PLATE_PATTERN = re.compile(r'^[A-Z]{2}[-\s]?\d{3}[-\s]?[A-Z]{2}$')
# FNI (ancien format): 123 ABC 45, 1234 AB 2A
FNI_PLATE_PATTERN = re.compile(r'^\d{1,4}[-\s]?[A-Z]{1,3}[-\s]?(\d{2}|2[AB]|97\d)$')

YEAR_PATTERN = re.compile(r'\b(19|20)\d{2}\b')
SHORT_DATE_PATTERN = re.compile(r'^\d{1,2}[/.-]\d{1,2}[/.-]\d{2}$')


def is_plate_format(plate: str) -> bool:
    plate = (plate or '').strip().upper()
    return bool(SIV_PLATE_PATTERN.match(plate) or FNI_PLATE_PATTERN.match(plate))


def is_registration_date_format(value: str) -> bool:
    value = (value or '').strip()
    return bool(YEAR_PATTERN.search(value) or SHORT_DATE_PATTERN.match(value))


def check_vehicle_record(record: VehicleRecord) -> List[str]:
    """
    Retourne la liste des avertissements pour les champs renseignés.
    Les champs vides ne génèrent aucun avertissement.
    """
    hints = []

    plate = record.registrationPlate.strip()
    if plate and not is_plate_format(plate):
        hints.append(f"{VEHICLE_FIELD_LABELS['registrationPlate']['label']}: format inhabituel ({plate})")

    vin = record.vin.strip()
    if vin and not is_vin_format(vin):
        suggestion = suggest_vin_correction(vin)
        label = VEHICLE_FIELD_LABELS['vin']['label']
        if suggestion:
            hints.append(f"{label}: caractères I/O/Q invalides, vouliez-vous dire {suggestion} ?")
        else:
            hints.append(f"{label}: 17 caractères attendus ({len(vin)} lus)")

    date_value = record.firstRegistrationDate.strip()
    if date_value and not is_registration_date_format(date_value):
        hints.append(f"{VEHICLE_FIELD_LABELS['firstRegistrationDate']['label']}: date illisible ({date_value})")

    if hints:
        logger.info(f"Contrôle carte grise: {len(hints)} avertissement(s)")

    return hints
