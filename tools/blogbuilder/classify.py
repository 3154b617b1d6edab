from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from .models import Document

Neighbours = Tuple[Optional[Document], Optional[Document]]


def _newest_first(doc: Document):
    # Undated documents share the lowest key so they land at the end.
    return (doc.date is not None, doc.date or datetime.min)


def classify(
    documents: Sequence[Document],
) -> Tuple[List[Document], List[Document]]:
    """
    Split documents into (posts, journals), each sorted newest first.

    Anything whose type is not "journal" counts as a post. Sorting is
    stable, so equal dates keep their input order.
    """
    posts = [d for d in documents if not d.is_journal]
    journals = [d for d in documents if d.is_journal]
    return (
        sorted(posts, key=_newest_first, reverse=True),
        sorted(journals, key=_newest_first, reverse=True),
    )


def adjacency(posts: Sequence[Document], index: int) -> Neighbours:
    """
    Return (previous, next) for posts[index].

    `posts` is newest first, so previous is the older neighbour at
    index + 1 and next is the newer one at index - 1.
    """
    if not 0 <= index < len(posts):
        raise IndexError(f"post index {index} out of range")
    previous = posts[index + 1] if index + 1 < len(posts) else None
    nxt = posts[index - 1] if index > 0 else None
    return previous, nxt


def navigation(posts: Sequence[Document]) -> Dict[str, Neighbours]:
    return {p.slug: adjacency(posts, i) for i, p in enumerate(posts)}
