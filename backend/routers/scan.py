from fastapi import APIRouter, HTTPException, UploadFile, File, Body
from typing import Any, Dict
import asyncio
import logging

from models import CarteGriseParseResponse
from ocr import perform_ocr, OcrServiceError
from parser import reconcile_carte_grise
from validation import check_vehicle_record

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/ocr/scan")
async def scan_carte_grise(media: UploadFile = File(...)) -> Dict[str, Any]:
    """
    Scanne une carte grise (photo JPEG) avec le modèle vision.
    Retourne le JSON brut du modèle ({} si rien n'a pu être lu).

    USAGE: POST multipart/form-data avec field 'media'
    """
    image_bytes = await media.read()
    if not image_bytes:
        raise HTTPException(status_code=400, detail="Image manquante")

    logger.info(f"Scan carte grise: {media.filename} ({media.content_type}, {len(image_bytes)/1024:.1f}KB)")

    try:
        return await asyncio.to_thread(perform_ocr, image_bytes)
    except OcrServiceError as e:
        logger.error(f"OCR non configuré: {e}")
        raise HTTPException(status_code=503, detail="Service de scan indisponible")
    except Exception as e:
        logger.error(f"Erreur OCR carte grise: {str(e)}")
        raise HTTPException(status_code=502, detail=f"Erreur du service de reconnaissance: {str(e)}")


@router.post("/ocr/parse", response_model=CarteGriseParseResponse)
async def parse_carte_grise_response(raw: Any = Body(None)):
    """
    Réconcilie une réponse OCR (forme quelconque) en données véhicule.
    """
    record, sources = reconcile_carte_grise(raw)
    return CarteGriseParseResponse(
        vehicle=record,
        sources=sources,
        hints=check_vehicle_record(record),
        has_data=not record.is_empty(),
    )
