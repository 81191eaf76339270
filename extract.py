"""
Text extraction for uploaded documents: plain text, PDF (with OCR fallback
for scanned files) and images via Tesseract.
"""

import io
import logging
import os

from errors import ValidationFailed

logger = logging.getLogger(__name__)

# ── File type helpers ────────────────────────────────────────────────────────
ALLOWED_TEXT  = {".txt"}
ALLOWED_PDF   = {".pdf"}
ALLOWED_IMAGE = {".png", ".jpg", ".jpeg", ".webp", ".tiff", ".bmp", ".gif"}
ALL_ALLOWED   = ALLOWED_TEXT | ALLOWED_PDF | ALLOWED_IMAGE

# Below this many characters a PDF's text layer is treated as missing
MIN_PDF_TEXT = 100

def ext(fn: str) -> str:
    return os.path.splitext(fn.lower())[1]

# ── Text extractors ──────────────────────────────────────────────────────────

def from_txt(raw: bytes) -> str:
    return raw.decode("utf-8", errors="ignore")

def from_pdf(raw: bytes) -> str:
    import PyPDF2
    try:
        reader = PyPDF2.PdfReader(io.BytesIO(raw))
        text = "\n".join(p.extract_text() or "" for p in reader.pages)
    except Exception as e:
        raise ValidationFailed(f"PDF error: {e}") from e
    return text if len(text.strip()) >= MIN_PDF_TEXT else pdf_ocr_fallback(raw)

def pdf_ocr_fallback(raw: bytes) -> str:
    from pdf2image import convert_from_bytes
    import pytesseract
    try:
        return "\n".join(pytesseract.image_to_string(p) for p in convert_from_bytes(raw, dpi=200))
    except Exception as e:
        raise ValidationFailed(f"PDF OCR failed: {e}") from e

def from_image(raw: bytes) -> str:
    import pytesseract
    from PIL import Image
    try:
        img = Image.open(io.BytesIO(raw))
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        return pytesseract.image_to_string(img)
    except Exception as e:
        raise ValidationFailed(f"Image OCR failed: {e}") from e

def extract_text(filename: str, raw: bytes) -> str:
    """Pull plain text out of an upload; raise ValidationFailed if there is none."""
    kind = ext(filename)
    if kind in ALLOWED_TEXT:
        text = from_txt(raw)
    elif kind in ALLOWED_PDF:
        text = from_pdf(raw)
    elif kind in ALLOWED_IMAGE:
        text = from_image(raw)
    else:
        raise ValidationFailed(f"Unsupported file type '{kind}'. Allowed: {', '.join(sorted(ALL_ALLOWED))}")

    if not text.strip():
        raise ValidationFailed("No text extracted from the uploaded file")
    logger.info("Extracted %d characters from %s", len(text), filename)
    return text
