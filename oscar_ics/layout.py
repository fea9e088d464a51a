"""
Layout reconstruction (PDF text -> table rows).

A schedule PDF carries no row/column markup, only positioned text. Rows are
recovered from geometry alone:

- fragments sharing a rounded baseline form one row
- rows go top to bottom (descending y), pages in document order
- cells go left to right (ascending x)
- blank cells are dropped, and so are rows left without any cell
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, Iterator, List

import pdfplumber
from pdfminer.pdfparser import PDFSyntaxError
from pdfplumber.utils.exceptions import PdfminerException

from oscar_ics.model import Row, TextFragment

logger = logging.getLogger(__name__)

# What opening or reading a broken or non-PDF file can raise
PDF_READ_ERRORS = (OSError, PDFSyntaxError, PdfminerException)


def _baseline_key(y: float) -> int:
    # Half-up rounding: sub-unit jitter from font metrics lands on one key.
    return math.floor(y + 0.5)


def group_page_rows(fragments: Iterable[TextFragment]) -> List[Row]:
    """
    Group the fragments of one page into ordered rows of trimmed cell strings.
    """
    rows_map: Dict[int, List[TextFragment]] = defaultdict(list)
    for fragment in fragments:
        # Marked-content items carry no string
        if fragment.text is None:
            continue
        rows_map[_baseline_key(fragment.y)].append(fragment)

    rows: List[Row] = []
    for key in sorted(rows_map, reverse=True):
        ordered = sorted(rows_map[key], key=lambda f: f.x)
        row = [f.text.strip() for f in ordered if f.text.strip()]
        if row:
            rows.append(row)
    return rows


def group_document_rows(pages: Iterable[Iterable[TextFragment]]) -> List[Row]:
    """
    Concatenate the rows of every page, in page order.
    """
    all_rows: List[Row] = []
    for page_number, fragments in enumerate(pages, start=1):
        page_rows = group_page_rows(fragments)
        logger.debug("page %d: %d rows", page_number, len(page_rows))
        all_rows.extend(page_rows)
    return all_rows


def iter_pdf_fragments(pdf_path: str | Path) -> Iterator[List[TextFragment]]:
    """
    Yield the text fragments of each page of a PDF, one page at a time.

    Blank characters are kept inside words so a multi-word cell such as
    "Intro to Computing" stays a single fragment.
    """
    with pdfplumber.open(str(pdf_path)) as pdf:
        for page in pdf.pages:
            words = page.extract_words(keep_blank_chars=True, return_chars=True)
            yield [TextFragment.from_word(word, page.height) for word in words]


def extract_document_rows(pdf_path: str | Path) -> List[Row]:
    """
    Read a schedule PDF and return its full row sequence.
    """
    return group_document_rows(iter_pdf_fragments(pdf_path))
