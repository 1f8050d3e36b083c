"""Convert rendered page HTML into plain text or Markdown."""

from __future__ import annotations

try:
    from bs4 import BeautifulSoup  # type: ignore[import-not-found]
except ImportError as exc:  # pragma: no cover - surfaced at runtime
    raise SystemExit(
        "Missing dependency 'beautifulsoup4'. Install with pip install "
        "beautifulsoup4"
    ) from exc

try:
    from markdownify import markdownify as md  # type: ignore[import-not-found]
except ImportError as exc:  # pragma: no cover - surfaced at runtime
    raise SystemExit(
        "Missing dependency 'markdownify'. Install with pip install"
        " markdownify"
    ) from exc

NON_CONTENT_TAGS = ("script", "style", "noscript", "template")


def _parse(html: str) -> BeautifulSoup:
    soup = BeautifulSoup(html, "lxml")
    for tag in soup.find_all(list(NON_CONTENT_TAGS)):
        tag.decompose()
    return soup


def html_to_text(html: str) -> str:
    """Return the visible text of ``html``, one non-empty line per block."""

    soup = _parse(html)
    lines = (
        " ".join(line.split())
        for line in soup.get_text(separator="\n").splitlines()
    )
    return "\n".join(line for line in lines if line)


def html_to_markdown(html: str) -> str:
    """Render ``html`` as Markdown using ATX headings."""

    soup = _parse(html)
    body = soup.body or soup
    return md(str(body), heading_style="ATX").strip()


__all__ = ["html_to_markdown", "html_to_text"]
