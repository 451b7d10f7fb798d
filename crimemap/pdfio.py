"""
PDF I/O utilities for Crime Map.
"""

from typing import List, Tuple

import pdfplumber

from crimemap.log import get_logger
from crimemap.model import ParseError

logger = get_logger(__name__)


def extract_fields_from_pdf(path: str) -> Tuple[List[str], int]:
    """
    Extract the text fields of a PDF, in reading order.

    Args:
        path: Path to the PDF file

    Returns:
        Fields of every page, and the number of pages
    """
    logger.info(f"Extracting text from {path}")

    try:
        fields: List[str] = []
        with pdfplumber.open(path) as pdf:
            for page_num, page in enumerate(pdf.pages, 1):
                logger.debug(f"Processing page {page_num} of {len(pdf.pages)}")
                fields.extend(extract_fields_from_page(page))
            pages = len(pdf.pages)
    except Exception as e:
        logger.error(f"Error extracting text from {path}: {e}")
        raise ParseError(f"Error extracting text from {path}: {e}") from e

    logger.info(f"Extracted {len(fields)} fields from {pages} pages")
    return fields, pages


def extract_fields_from_page(page) -> List[str]:
    """
    Extract the text fields of one PDF page.

    Each visual line of text is one field. Leading whitespace is kept since
    some fields, like the incident total, are printed with it.

    Args:
        page: pdfplumber page object

    Returns:
        Fields, top to bottom
    """
    lines = page.extract_text_lines(strip=False, return_chars=False)
    return [line["text"].rstrip() for line in lines if line["text"].strip()]
