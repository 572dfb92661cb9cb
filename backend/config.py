from pathlib import Path
from dotenv import load_dotenv
import os
import logging

ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# API MyJantes (application mobile)
API_BASE = os.environ.get('MYJANTES_API_BASE', 'https://appmyjantes.mytoolsgroup.eu').rstrip('/')
API_TIMEOUT = float(os.environ.get('API_TIMEOUT', '30'))
OCR_SCAN_ENDPOINT = os.environ.get('OCR_SCAN_ENDPOINT', '/api/ocr/scan')

# Vision (OCR carte grise)
OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY', '')
OPENAI_BASE_URL = os.environ.get('OPENAI_BASE_URL') or None
OCR_MODEL = os.environ.get('OCR_MODEL', 'gpt-4o')
OCR_MAX_IMAGE_SIZE = int(os.environ.get('OCR_MAX_IMAGE_SIZE', '1024'))

# Configure logging
logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO'),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("myjantes")
