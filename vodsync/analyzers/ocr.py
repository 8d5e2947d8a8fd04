"""Tesseract OCR of a single frame."""

from pathlib import Path

import pytesseract
from PIL import Image
from pytesseract import TesseractError, TesseractNotFoundError

from vodsync.models import OcrMode

LINE = OcrMode(name="line", psm=7)
WORD = OcrMode(name="word", psm=8)

# Tried in order on every frame until one of them reads a clock.
DEFAULT_MODES: tuple[OcrMode, ...] = (LINE, WORD)


class RecognitionFailed(RuntimeError):
    """Raised when Tesseract cannot process one frame in one mode."""
    pass


def tesseract_config(mode: OcrMode, oem: int = 3) -> str:
    return f"--oem {oem} --psm {mode.psm}"


def read_text(image_path: Path, mode: OcrMode, lang: str = "eng", oem: int = 3) -> str:
    """Return the raw text Tesseract recognizes on *image_path*.

    The text is not checked for any particular shape.
    """
    try:
        with Image.open(image_path) as image:
            return pytesseract.image_to_string(
                image, lang=lang, config=tesseract_config(mode, oem)
            )
    except TesseractNotFoundError:
        raise
    except (TesseractError, OSError) as e:
        raise RecognitionFailed(f"OCR ({mode.name}) failed on {image_path}: {e}") from e
