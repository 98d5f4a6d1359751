"""Runtime configuration, read from the environment (and an optional .env)."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DATA_DIR = Path(os.getenv("PDFSTENCIL_DATA_DIR", "/tmp/pdfstencil")).resolve()
TEMPLATES_DIR = DATA_DIR / "templates"

DEFAULT_FONT_SIZE = float(os.getenv("PDFSTENCIL_DEFAULT_FONT_SIZE", "10"))
DEFAULT_COLOR = os.getenv("PDFSTENCIL_DEFAULT_COLOR", "#000000")

LOG_LEVEL = os.getenv("PDFSTENCIL_LOG_LEVEL", "INFO").upper()
