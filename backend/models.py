from pydantic import BaseModel
from typing import List, Dict


# ============ Vehicle Models ============

# Ordre d'affichage du formulaire de demande de devis
VEHICLE_FIELDS = (
    "registrationPlate",
    "make",
    "model",
    "firstRegistrationDate",
    "vin",
    "fuelType",
    "color",
    "fiscalHorsepower",
)

VEHICLE_FIELD_LABELS: Dict[str, Dict[str, str]] = {
    "registrationPlate": {"label": "Immatriculation", "placeholder": "Ex: AB-123-CD"},
    "make": {"label": "Marque", "placeholder": "Ex: Audi, BMW, Mercedes..."},
    "model": {"label": "Modèle", "placeholder": "Ex: A4, Série 3, Classe C..."},
    "firstRegistrationDate": {"label": "Année / 1ère mise en circulation", "placeholder": "Ex: 2021"},
    "vin": {"label": "N° VIN (châssis)", "placeholder": "17 caractères"},
    "fuelType": {"label": "Type carburant / énergie", "placeholder": "Ex: Diesel, Essence, Électrique..."},
    "color": {"label": "Couleur", "placeholder": "Ex: Noir, Blanc, Gris..."},
    "fiscalHorsepower": {"label": "Puissance fiscale (CV)", "placeholder": "Ex: 7 CV"},
}


class VehicleRecord(BaseModel):
    """
    Données véhicule issues d'une carte grise (Certificat d'Immatriculation).

    Les huit champs existent toujours: un champ non renseigné vaut "".
    Tout reste en texte (année, puissance "7 CV"...), les sources ne sont
    pas homogènes.
    """
    registrationPlate: str = ""
    make: str = ""
    model: str = ""
    firstRegistrationDate: str = ""
    vin: str = ""
    fuelType: str = ""
    color: str = ""
    fiscalHorsepower: str = ""

    def filled_fields(self) -> List[str]:
        """Noms des champs renseignés (non vides après strip)"""
        return [name for name in VEHICLE_FIELDS if getattr(self, name).strip()]

    def is_empty(self) -> bool:
        return not self.filled_fields()


# ============ API Models ============

class CarteGriseParseResponse(BaseModel):
    """Réponse de /ocr/parse"""
    vehicle: VehicleRecord
    sources: Dict[str, str] = {}
    hints: List[str] = []
    has_data: bool = False
