"""Link discovery helpers for listing pages."""

import re
from typing import Iterable, List, Sequence

HREF_PATTERN = re.compile(r"""href=["']([^"']+)["']""")


def extract_links(html_fragments: Iterable[str]) -> List[str]:
    """Return absolute http(s) hrefs from the fragments, in document order."""
    links: List[str] = []
    for fragment in html_fragments:
        for href in HREF_PATTERN.findall(fragment or ""):
            if href.startswith("http://") or href.startswith("https://"):
                links.append(href)
    return links


def should_exclude_link(link: str, exclude: Sequence[str]) -> bool:
    return any(item in link for item in exclude)


def candidate_links(links: Iterable[str], exclude: Sequence[str]) -> List[str]:
    """Drop denylisted links, keeping discovery order."""
    return [link for link in links if not should_exclude_link(link, exclude)]
