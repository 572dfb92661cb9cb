"""
VIN Utilities - Contrôles et correction OCR
Module VIN pour les numéros de châssis lus sur carte grise (champ E)

Caractéristiques:
- Contrôle alphabet/longueur (17 caractères, sans I, O, Q)
- Check-digit ISO 3779 (informatif: facultatif pour les VIN européens)
- Correction des confusions OCR courantes
"""

import re
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)


VIN_PATTERN = re.compile(r'^[A-HJ-NPR-Z0-9]{17}$')

# ============ VIN CHECK DIGIT ============

# Valeurs de translittération VIN (ISO 3779)
VIN_TRANSLITERATION = {
    'A': 1, 'B': 2, 'C': 3, 'D': 4, 'E': 5, 'F': 6, 'G': 7, 'H': 8,
    'J': 1, 'K': 2, 'L': 3, 'M': 4, 'N': 5, 'P': 7, 'R': 9,
    'S': 2, 'T': 3, 'U': 4, 'V': 5, 'W': 6, 'X': 7, 'Y': 8, 'Z': 9,
}
VIN_TRANSLITERATION.update({str(d): d for d in range(10)})

# Poids par position (1-17)
VIN_WEIGHTS = [8, 7, 6, 5, 4, 3, 2, 10, 0, 9, 8, 7, 6, 5, 4, 3, 2]


def clean_vin(vin: str) -> str:
    """Majuscules, sans espaces ni tirets"""
    return re.sub(r'[\s-]', '', vin or '').upper()


def is_vin_format(vin: str) -> bool:
    """17 caractères de l'alphabet VIN"""
    return bool(VIN_PATTERN.match(clean_vin(vin)))


def calculate_check_digit(vin: str) -> str:
    """
    Calcule le check digit d'un VIN (position 9).

    Formule ISO 3779:
    1. Translittérer chaque caractère en valeur numérique
    2. Multiplier par le poids de position
    3. Sommer et modulo 11
    4. Si résultat = 10, check digit = 'X'
    """
    vin = clean_vin(vin)
    if len(vin) != 17:
        return ""

    total = sum(VIN_TRANSLITERATION.get(char, 0) * VIN_WEIGHTS[i] for i, char in enumerate(vin))
    remainder = total % 11
    return 'X' if remainder == 10 else str(remainder)


def validate_vin_checksum(vin: str) -> bool:
    """Vérifie si le check digit du VIN est valide."""
    vin = clean_vin(vin)
    if not is_vin_format(vin):
        return False
    return vin[8] == calculate_check_digit(vin)


# ============ AUTO-CORRECTION OCR ============

# Caractères qui n'existent pas dans un VIN
OCR_CORRECTIONS = {
    'O': '0',
    'I': '1',
    'Q': '0',
}


def correct_vin_ocr_errors(vin: str) -> str:
    """
    Corrige les erreurs OCR courantes dans un VIN.
    - O → 0
    - I → 1
    - Q → 0
    """
    if not vin:
        return vin
    return ''.join(OCR_CORRECTIONS.get(char, char) for char in clean_vin(vin))


def suggest_vin_correction(vin: str) -> Optional[str]:
    """
    Propose un VIN corrigé si la correction OCR le rend valide (format).
    Retourne None si le VIN est déjà correct ou irrécupérable.
    """
    if not vin or is_vin_format(vin):
        return None

    corrected = correct_vin_ocr_errors(vin)
    if is_vin_format(corrected):
        logger.info(f"VIN corrigé (OCR): {vin} → {corrected}")
        return corrected
    return None


def describe_vin(vin: str) -> Dict[str, object]:
    """
    Résumé des contrôles VIN.

    Returns:
        {
            "vin": VIN nettoyé
            "is_format_valid": Bool
            "checksum_valid": Bool (informatif)
            "suggestion": VIN corrigé ou None
        }
    """
    cleaned = clean_vin(vin)
    return {
        "vin": cleaned,
        "is_format_valid": is_vin_format(cleaned),
        "checksum_valid": validate_vin_checksum(cleaned),
        "suggestion": suggest_vin_correction(cleaned),
    }
