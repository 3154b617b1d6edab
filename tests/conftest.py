from datetime import datetime

import pytest

from blogbuilder.models import Document, Frontmatter


def make_doc(slug, date=None, type=None, title=None, **extra):
    data = dict(extra)
    if date is not None:
        data["date"] = date
    if type is not None:
        data["type"] = type
    if title is not None:
        data["title"] = title
    return Document(
        slug=slug,
        frontmatter=Frontmatter.from_mapping(data),
        excerpt=f"excerpt of {slug}",
        body=f"<p>body of {slug}</p>",
    )


@pytest.fixture
def sample_docs():
    return [
        make_doc("/p1/", datetime(2020, 1, 1), title="P1"),
        make_doc("/j1/", datetime(2020, 1, 15), type="journal", title="J1"),
        make_doc("/p3/", datetime(2020, 3, 1), title="P3"),
        make_doc("/p2/", datetime(2020, 2, 1), type="post", title="P2"),
        make_doc("/j2/", datetime(2020, 2, 15), type="journal", title="J2"),
    ]
