# ycb/models/entry.py
"""Knowledge-base entry as returned by either search mode."""

from dataclasses import dataclass, field, replace
from typing import Dict, Any, List, Optional


@dataclass(frozen=True)
class EntryMetadata:
    """Structured fields attached to an entry."""

    title: Optional[str] = None
    author: Optional[str] = None  # Source URL or free text
    type: Optional[str] = None  # 'image', 'text', ...
    og_description: Optional[str] = None
    og_images: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> 'EntryMetadata':
        """Parse the camelCase wire shape."""
        raw = dict(raw or {})
        og_images = raw.pop('ogImages', None) or []
        if isinstance(og_images, str):
            og_images = [og_images]

        return cls(
            title=raw.pop('title', None) or None,
            author=raw.pop('author', None) or None,
            type=raw.pop('type', None) or None,
            og_description=raw.pop('ogDescription', None) or None,
            og_images=[str(url) for url in og_images if url],
            extra=raw,
        )


@dataclass(frozen=True)
class Highlight:
    """Matched-term markup for a lexical hit (Meilisearch <em> tags)."""

    data: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None

    @classmethod
    def from_hit(cls, hit: Dict[str, Any]) -> Optional['Highlight']:
        """
        Build from a Meilisearch hit.

        Accepts the native `_formatted` document as well as the
        InstantSearch `_highlightResult` shape ({field: {value}}).
        """
        formatted = hit.get('_formatted')
        if isinstance(formatted, dict):
            metadata = formatted.get('metadata') or {}
            return cls(
                data=formatted.get('data'),
                title=metadata.get('title'),
                author=metadata.get('author'),
            )

        highlight = hit.get('_highlightResult')
        if isinstance(highlight, dict):
            metadata = highlight.get('metadata') or {}
            return cls(
                data=_value(highlight.get('data')),
                title=_value(metadata.get('title')),
                author=_value(metadata.get('author')),
            )

        return None


def _value(node: Any) -> Optional[str]:
    if isinstance(node, dict):
        return node.get('value')
    return None


@dataclass(frozen=True)
class Entry:
    """
    One knowledge-base item.

    Immutable from the client's perspective: hydration returns a copy.
    `similarity` is only set on semantic results, `highlight` only on
    lexical results, `image` only on hydrated image entries.
    """

    id: str
    data: str = ""
    metadata: EntryMetadata = field(default_factory=EntryMetadata)
    similarity: Optional[float] = None  # 0.0 to 1.0, semantic results only
    highlight: Optional[Highlight] = None
    image: Optional[str] = None

    def __post_init__(self):
        if not self.id or not str(self.id).strip():
            raise ValueError("Entry id is required")

    @property
    def is_image(self) -> bool:
        return self.metadata.type == "image"

    def with_image(self, url: Optional[str]) -> 'Entry':
        """Return a copy carrying the resolved image URL."""
        return replace(self, image=url)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'Entry':
        """Parse a search payload (lexical hit or semantic result)."""
        similarity = raw.get('similarity')
        if similarity is not None:
            similarity = min(1.0, max(0.0, float(similarity)))

        return cls(
            id='' if raw.get('id') is None else str(raw['id']),
            data=str(raw.get('data') or ''),
            metadata=EntryMetadata.from_dict(raw.get('metadata')),
            similarity=similarity,
            highlight=Highlight.from_hit(raw),
            image=raw.get('image') or None,
        )
