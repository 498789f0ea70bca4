from __future__ import annotations

import base64
from html import escape

from starlette.concurrency import run_in_threadpool

from capview.domain.hierarchy.export import Snapshot
from capview.domain.hierarchy.export_geometry import PagePlan


class PdfBackendUnavailable(RuntimeError):
    """weasyprint is not installed."""


class WeasyPrintAssembler:
    """Tiles a captured image over PDF pages.

    Each page is a clipped box of the page size with the full image placed at
    (margin, margin - offset), which is the same strip-per-page scheme a
    canvas-based PDF writer uses.
    """

    media_type = "application/pdf"

    async def assemble(self, snapshot: Snapshot, plan: PagePlan, title: str) -> bytes:
        html = build_pages_html(snapshot, plan, title)
        return await run_in_threadpool(_write_pdf, html)


def _write_pdf(html: str) -> bytes:
    """Render the page HTML with weasyprint.

    Raises PdfBackendUnavailable if weasyprint is not installed.
    """
    try:
        from weasyprint import HTML  # type: ignore[import-untyped,import-not-found]
    except ImportError as err:
        msg = "PDF export requires weasyprint. Install with: pip install capview[pdf]"
        raise PdfBackendUnavailable(msg) from err

    return HTML(string=html).write_pdf()  # type: ignore[no-any-return]


def build_pages_html(snapshot: Snapshot, plan: PagePlan, title: str) -> str:
    encoded = base64.b64encode(snapshot.data).decode("ascii")
    src = f"data:{snapshot.media_type};base64,{encoded}"

    pages = "\n".join(
        f"""<div class="page">
    <img src="{src}" style="left: {plan.margin:.2f}pt; top: {plan.margin - offset:.2f}pt;">
</div>"""
        for offset in plan.offsets
    )

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{escape(title)}</title>
<style>
    @page {{ size: {plan.page_width:.2f}pt {plan.page_height:.2f}pt; margin: 0; }}
    body {{ margin: 0; }}
    .page {{ position: relative; width: {plan.page_width:.2f}pt; height: {plan.page_height:.2f}pt;
             overflow: hidden; page-break-after: always; }}
    .page:last-child {{ page-break-after: auto; }}
    .page img {{ position: absolute; width: {plan.image_width:.2f}pt; height: {plan.image_height:.2f}pt; }}
</style>
</head>
<body>
{pages}
</body>
</html>"""
