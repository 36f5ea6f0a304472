"""
PDF Export.

Renders a note as a single-column A4 text document with fpdf2.

Layout:
    title      16pt
    Tags: ...  10pt (only when the note has tags)
    body       12pt, wrapped to a 170mm column
"""

from fpdf import FPDF

from notekeeper.backend.core.logging import get_logger
from notekeeper.backend.models.note import UNTITLED_TITLE, Note

logger = get_logger(__name__)

FONT = "Helvetica"
COLUMN_WIDTH = 170


def _latin1(text: str) -> str:
    # Core PDF fonts only cover Latin-1.
    return text.encode("latin-1", "replace").decode("latin-1")


def render_text_document(
    title: str,
    tag_line: str | None,
    body_lines: list[str],
) -> bytes:
    """
    Render a simple text document.

    Args:
        title: Heading printed at the top
        tag_line: Optional line printed under the title
        body_lines: Paragraphs of the body, one per entry

    Returns:
        PDF file contents
    """
    pdf = FPDF(format="A4")
    pdf.set_margins(20, 20, 20)
    pdf.add_page()

    pdf.set_font(FONT, style="B", size=16)
    pdf.multi_cell(COLUMN_WIDTH, 9, _latin1(title), new_x="LMARGIN", new_y="NEXT")

    if tag_line:
        pdf.set_font(FONT, size=10)
        pdf.multi_cell(COLUMN_WIDTH, 6, _latin1(tag_line), new_x="LMARGIN", new_y="NEXT")

    pdf.ln(4)
    pdf.set_font(FONT, size=12)
    for line in body_lines:
        pdf.multi_cell(COLUMN_WIDTH, 6, _latin1(line) or " ", new_x="LMARGIN", new_y="NEXT")

    return bytes(pdf.output())


def export_filename(note: Note) -> str:
    """File name offered for a note download."""
    title = (note.title or "").strip() or UNTITLED_TITLE
    safe = "".join(ch for ch in _latin1(title) if ch not in '\\/:*?"<>|').strip()
    return f"{safe or UNTITLED_TITLE}.pdf"


def render_note_pdf(note: Note) -> bytes:
    """Render a note (title, tags, content) as PDF."""
    title = (note.title or "").strip() or UNTITLED_TITLE
    tag_line = f"Tags: {', '.join(note.tags)}" if note.tags else None
    body_lines = (note.content or "").splitlines()

    logger.debug("Rendering note PDF", extra={"note_id": note.id, "lines": len(body_lines)})
    return render_text_document(title, tag_line, body_lines)
