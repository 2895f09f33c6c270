# ycb/core/normalizer.py
"""Display shaping for entries. Pure functions, no I/O."""

import re
from typing import List, Optional
from urllib.parse import urlparse

from rich.text import Text

from ..models.entry import Entry

ELLIPSIS = "..."
TITLE_LENGTH = 60
SUBTITLE_LENGTH = 100
SOURCE_LENGTH = 30

COMMONBASE_DOMAIN = "yourcommonbase.com"
COMMONBASE_LABEL = "Your Commonbase"
DEFAULT_ICON = "📄"

BACKEND_SEGMENT = "/backend"
DASHBOARD_SEGMENT = "/dashboard"

HIGHLIGHT_PRE = "<em>"
HIGHLIGHT_POST = "</em>"

_HOSTNAME_RE = re.compile(r"^[a-z0-9-]+(\.[a-z0-9-]+)+$", re.IGNORECASE)
_HIGHLIGHT_RE = re.compile(f"{re.escape(HIGHLIGHT_PRE)}(.*?){re.escape(HIGHLIGHT_POST)}", re.DOTALL)


def display_title(entry: Entry) -> str:
    if entry.metadata.title:
        return entry.metadata.title
    return entry.data[:TITLE_LENGTH] + ELLIPSIS


def display_subtitle(entry: Entry) -> str:
    if entry.metadata.og_description:
        return entry.metadata.og_description
    return entry.data[:SUBTITLE_LENGTH] + ELLIPSIS


def source_label(author: Optional[str]) -> str:
    """
    Short label for an entry's source.

    Idempotent: a label it produced (friendly label, bare hostname or
    truncated text) comes back unchanged.
    """
    if not author:
        return ""

    if COMMONBASE_DOMAIN in author:
        return COMMONBASE_LABEL

    try:
        parsed = urlparse(author)
        host = parsed.hostname if parsed.scheme else None
    except ValueError:
        host = None
    if host:
        return host[4:] if host.startswith("www.") else host

    if _HOSTNAME_RE.match(author):
        return author

    if len(author) <= SOURCE_LENGTH:
        return author
    if author.endswith(ELLIPSIS) and len(author) <= SOURCE_LENGTH + len(ELLIPSIS):
        return author
    return author[:SOURCE_LENGTH] + ELLIPSIS


def display_icon(entry: Entry) -> str:
    if entry.metadata.og_images:
        return entry.metadata.og_images[0]
    if entry.image:
        return entry.image
    return DEFAULT_ICON


def entry_url(base_url: str, entry_id: str) -> str:
    base = base_url.rstrip("/").replace(BACKEND_SEGMENT, "", 1)
    return f"{base}{DASHBOARD_SEGMENT}/entry/{entry_id}"


def dashboard_url(base_url: str) -> str:
    return base_url.rstrip("/").replace(BACKEND_SEGMENT, DASHBOARD_SEGMENT, 1)


def match_percent(similarity: float) -> int:
    return round(similarity * 100)


def match_label(similarity: float) -> str:
    return f"{match_percent(similarity)}% match"


def accessories(entry: Entry, semantic: bool = False) -> List[str]:
    """Right-hand labels of a result row. Similarity only on semantic rows."""
    items = []
    if semantic and entry.similarity is not None:
        items.append(match_label(entry.similarity))
    if entry.metadata.author:
        items.append(source_label(entry.metadata.author))
    return items


def strip_highlight(text: Optional[str]) -> str:
    if not text:
        return ""
    return text.replace(HIGHLIGHT_PRE, "").replace(HIGHLIGHT_POST, "")


def highlight_to_rich(text: Optional[str], style: str = "bold yellow") -> Text:
    """Render <em>-marked text with the matched terms styled."""
    result = Text()
    if not text:
        return result

    cursor = 0
    for match in _HIGHLIGHT_RE.finditer(text):
        result.append(text[cursor:match.start()])
        result.append(match.group(1), style=style)
        cursor = match.end()
    result.append(text[cursor:])
    return result


def highlighted_title(entry: Entry) -> Text:
    """Title with matched terms styled when the lexical hit carries them."""
    if entry.highlight and entry.highlight.title and entry.metadata.title:
        return highlight_to_rich(entry.highlight.title)
    return Text(display_title(entry))
