"""
OCR Carte Grise - Vision GPT
Lecture d'un Certificat d'Immatriculation français par modèle vision

Pipeline:
Image → Compression (Pillow) → GPT Vision → Extraction JSON

La réponse est retournée brute (dict): la réconciliation en VehicleRecord
se fait dans parser.py.
"""

from PIL import Image
import base64
import io
import json
import re
import logging
from typing import Any, Dict, Optional

from config import OPENAI_API_KEY, OPENAI_BASE_URL, OCR_MODEL, OCR_MAX_IMAGE_SIZE

logger = logging.getLogger(__name__)


CARTE_GRISE_PROMPT = """Extrais les informations suivantes de cette carte grise française (Certificat d'Immatriculation) au format JSON :
  - immatriculation (A)
  - marque (D.1)
  - modele (D.2 / D.3)
  - annee (B - date de 1ère immatriculation)
  - vin (E)
  - typeCarburant (P.3)
  - couleur
  - puissanceFiscale (P.6)

Réponds uniquement avec le JSON."""

JSON_OBJECT_PATTERN = re.compile(r'\{[\s\S]*\}')


class OcrServiceError(Exception):
    """Service vision indisponible ou non configuré"""


def compress_image_for_vision(file_bytes: bytes, max_size: int = OCR_MAX_IMAGE_SIZE, quality: int = 70) -> str:
    """
    Compresse l'image pour réduire les tokens Vision API.
    - Redimensionne à max 1024px
    - Compression JPEG quality 70
    - Retourne base64
    """
    try:
        image = Image.open(io.BytesIO(file_bytes))

        if image.mode in ('RGBA', 'P', 'LA'):
            image = image.convert('RGB')

        width, height = image.size
        if max(width, height) > max_size:
            ratio = max_size / max(width, height)
            new_size = (int(width * ratio), int(height * ratio))
            image = image.resize(new_size, Image.Resampling.LANCZOS)

        buffer = io.BytesIO()
        image.save(buffer, format='JPEG', quality=quality, optimize=True)
        compressed_bytes = buffer.getvalue()

        logger.info(f"Image compressed: {len(file_bytes)/1024:.1f}KB → {len(compressed_bytes)/1024:.1f}KB")

        return base64.b64encode(compressed_bytes).decode('utf-8')
    except Exception as e:
        logger.error(f"Compression error: {e}")
        return base64.b64encode(file_bytes).decode('utf-8')


def extract_json_object(text: Optional[str]) -> Dict[str, Any]:
    """
    Extrait le premier objet JSON de la réponse du modèle
    (le modèle entoure souvent le JSON de ```json ... ```).
    Retourne {} si absent ou invalide.
    """
    if not text:
        return {}

    json_match = JSON_OBJECT_PATTERN.search(text)
    if not json_match:
        logger.warning("OCR: aucun objet JSON dans la réponse")
        return {}

    try:
        parsed = json.loads(json_match.group())
    except json.JSONDecodeError as e:
        logger.error(f"OCR Parse Error: {e}")
        return {}

    return parsed if isinstance(parsed, dict) else {}


def get_openai_client():
    if not OPENAI_API_KEY:
        raise OcrServiceError("OPENAI_API_KEY non configurée")

    from openai import OpenAI
    return OpenAI(api_key=OPENAI_API_KEY, base_url=OPENAI_BASE_URL)


def perform_ocr(image_bytes: bytes, client=None, model: str = OCR_MODEL) -> Dict[str, Any]:
    """
    Envoie l'image au modèle vision et retourne le JSON extrait.

    Lève OcrServiceError si le service n'est pas configuré;
    les erreurs de l'API OpenAI sont propagées à l'appelant.
    """
    if client is None:
        client = get_openai_client()

    image_base64 = compress_image_for_vision(image_bytes)

    response = client.chat.completions.create(
        model=model,
        messages=[{
            "role": "user",
            "content": [
                {"type": "text", "text": CARTE_GRISE_PROMPT},
                {"type": "image_url", "image_url": {"url": f"data:image/jpeg;base64,{image_base64}"}},
            ],
        }],
        max_tokens=800,
        temperature=0,
    )

    raw_text = response.choices[0].message.content or ""
    logger.info(f"OCR carte grise ({model}): {len(raw_text)} caractères reçus")

    return extract_json_object(raw_text)
