"""
Parser Carte Grise - Réconciliation de la réponse OCR
Transforme la réponse (hétérogène) du service de reconnaissance en VehicleRecord

Formes de réponse acceptées (non exclusives):
- Objet plat: clés françaises, anglaises ou codes officiels (A, D.1, E...)
- Objet enveloppé sous "data" ou "result"
- Liste "fields" de paires {key, value}
- Texte brut sous "text" (fallback regex plaque / VIN)

Priorité stricte par champ: clés JSON > liste codée > texte.
Un champ rempli par une source n'est jamais écrasé par une source plus faible.
"""

import re
import unicodedata
from typing import Any, Dict, List, Optional, Tuple
import logging

from models import VehicleRecord, VEHICLE_FIELDS

logger = logging.getLogger(__name__)


# ============ TABLE DES CHAMPS ============

# Champ → (synonymes JSON, codes officiels du certificat)
FIELD_SOURCE_KEYS = {
    "registrationPlate": (("immatriculation", "registration", "plateNumber"), ("A",)),
    "make": (("marque", "brand", "make"), ("D.1",)),
    "model": (("modele", "model"), ("D.2", "D.3")),
    "firstRegistrationDate": (("annee", "year", "firstRegistrationDate"), ("B",)),
    "vin": (("vin", "VIN", "chassisNumber"), ("E",)),
    "fuelType": (("typeCarburant", "fuel", "fuelType"), ("P.3",)),
    "color": (("couleur", "color", "colour"), ()),
    "fiscalHorsepower": (("puissanceFiscale", "fiscalPower", "taxHorsepower"), ("P.6",)),
}

# Règles de la liste "fields", évaluées dans cet ordre.
# DATE avant IMMATRICULATION ("date de 1ère immatriculation"),
# modèle en dernier car TYPE est trop large ("type carburant").
CODED_FIELD_RULES = [
    ("firstRegistrationDate", ("B",), ("DATE", "ANNEE", "YEAR")),
    ("registrationPlate", ("A",), ("IMMATRICULATION", "PLATE", "REGISTRATION")),
    ("make", ("D.1",), ("MARQUE", "MAKE", "BRAND")),
    ("vin", ("E",), ("VIN", "CHASSIS")),
    ("fuelType", ("P.3",), ("CARBURANT", "ENERGIE", "FUEL")),
    ("fiscalHorsepower", ("P.6",), ("PUISSANCE", "HORSEPOWER")),
    ("color", (), ("COULEUR", "COLOR", "COLOUR")),
    ("model", ("D.2", "D.3"), ("MODELE", "MODEL", "TYPE")),
]

PLATE_TEXT_PATTERN = re.compile(r'[A-Z]{2}[-\s]?\d{3}[-\s]?[A-Z]{2}')
VIN_TEXT_PATTERN = re.compile(r'[A-HJ-NPR-Z0-9]{17}')


def _code_variants(codes: Tuple[str, ...]) -> List[str]:
    """D.1 → [D.1, D1] (le prompt vision produit parfois les codes sans point)"""
    variants = []
    for code in codes:
        for variant in (code, code.replace(".", "")):
            if variant not in variants:
                variants.append(variant)
    return variants


def _code_pattern(code: str) -> re.Pattern:
    # "D.1", "D.1 MARQUE", "A:" mais pas "ANNEE" ni "D.12"
    return re.compile(r'^' + re.escape(code) + r'(?![0-9A-Z.])')


CODED_FIELD_MATCHERS = [
    (field, [_code_pattern(c) for c in _code_variants(codes)], labels)
    for field, codes, labels in CODED_FIELD_RULES
]


# ============ HELPERS ============

def clean_value(value: Any) -> str:
    """
    Normalise une valeur brute en texte.

    - str → strip
    - int/float → str (année 2019, puissance 7)
    - tout le reste (None, bool, dict, list) → ""
    """
    if isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def normalize_key(key: Any) -> str:
    """Majuscules sans accents: 'Modèle' → 'MODELE'"""
    if not isinstance(key, str):
        return ""
    decomposed = unicodedata.normalize('NFKD', key)
    return ''.join(c for c in decomposed if not unicodedata.combining(c)).upper().strip()


def response_layers(raw: Any) -> List[Dict[str, Any]]:
    """
    Objets à sonder, du plus spécifique au plus général.
    L'enveloppe data/result est dépliée d'un niveau, l'objet externe reste sondé.
    """
    if not isinstance(raw, dict):
        return []

    layers = []
    for wrapper in ("data", "result"):
        inner = raw.get(wrapper)
        if isinstance(inner, dict):
            layers.append(inner)
            break
    layers.append(raw)
    return layers


# ============ SONDES ============

def probe_flat_keys(layer: Dict[str, Any]) -> Dict[str, str]:
    """Étape 1: clés plates (synonymes puis codes officiels)"""
    found = {}
    for field, (synonyms, codes) in FIELD_SOURCE_KEYS.items():
        for key in list(synonyms) + _code_variants(codes):
            value = clean_value(layer.get(key))
            if value:
                found[field] = value
                break
    return found


def match_coded_field(key: str) -> Optional[str]:
    """Retourne le champ correspondant à une clé de la liste 'fields'"""
    if not key:
        return None
    for field, patterns, labels in CODED_FIELD_MATCHERS:
        if any(p.match(key) for p in patterns):
            return field
        if any(label in key for label in labels):
            return field
    return None


def probe_coded_fields(layer: Dict[str, Any]) -> Dict[str, str]:
    """Étape 2: liste 'fields' de paires {key, value}"""
    entries = layer.get("fields")
    if not isinstance(entries, list):
        return {}

    found = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        field = match_coded_field(normalize_key(entry.get("key") or entry.get("label")))
        value = clean_value(entry.get("value"))
        if field and value and field not in found:
            found[field] = value
    return found


def probe_free_text(layer: Dict[str, Any]) -> Dict[str, str]:
    """Étape 3: regex sur le texte OCR brut (plaque et VIN uniquement)"""
    text = layer.get("text")
    if not isinstance(text, str):
        return {}

    found = {}
    plate_match = PLATE_TEXT_PATTERN.search(text)
    if plate_match:
        found["registrationPlate"] = plate_match.group()
    vin_match = VIN_TEXT_PATTERN.search(text)
    if vin_match:
        found["vin"] = vin_match.group()
    return found


PROBES = (
    ("json", probe_flat_keys),
    ("fields", probe_coded_fields),
    ("text", probe_free_text),
)


# ============ RÉCONCILIATION ============

def reconcile_carte_grise(raw: Any) -> Tuple[VehicleRecord, Dict[str, str]]:
    """
    Réconcilie une réponse OCR en VehicleRecord.

    Returns:
        (record, sources) où sources indique pour chaque champ rempli
        la sonde qui l'a fourni ("json", "fields" ou "text").
    """
    values: Dict[str, str] = {}
    sources: Dict[str, str] = {}

    layers = response_layers(raw)
    for source_name, probe in PROBES:
        for layer in layers:
            for field, value in probe(layer).items():
                if field not in values:
                    values[field] = value
                    sources[field] = source_name

    record = VehicleRecord(**values)

    if layers:
        logger.info(f"Carte grise: {len(values)}/{len(VEHICLE_FIELDS)} champs extraits {sources}")
    else:
        logger.warning(f"Réponse OCR inexploitable (type {type(raw).__name__})")

    return record, sources


def parse_carte_grise(raw: Any) -> VehicleRecord:
    """Réponse OCR (forme quelconque) → VehicleRecord, sans jamais lever d'exception"""
    record, _ = reconcile_carte_grise(raw)
    return record
