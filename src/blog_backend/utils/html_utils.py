"""
# HTML Utilities

Pure helpers that turn raw post HTML into what the API stores and serves.

- **`sanitize_post_body`**: cleans a body against the post allow-list using `bleach`.
- **`extract_thumbnail`**: picks the representative `<img>` tag of a body.
- **`build_excerpt`**: produces the short, paragraph-only preview used in listings.

None of these functions touch the database or the filesystem.
"""

import random
import re
from typing import Dict, List, Optional

import bleach

# Allow-list applied to every stored post body
ALLOWED_TAGS: List[str] = [
    "h1",
    "h2",
    "b",
    "i",
    "u",
    "s",
    "p",
    "ul",
    "ol",
    "li",
    "blockquote",
    "a",
    "img",
    "pre",
    "span",
]
ALLOWED_ATTRIBUTES: Dict[str, List[str]] = {
    "a": ["href", "name", "target"],
    "img": ["src"],
    "li": ["class"],
    "pre": ["class", "spellcheck"],
    "span": ["class"],
}
ALLOWED_PROTOCOLS: List[str] = ["data", "http"]

# Elements removed together with their content, not just unwrapped
DISCARDED_CONTENT_TAGS: List[str] = ["script", "style", "textarea", "noscript"]
DISCARDED_CONTENT_PATTERN = re.compile(
    r"<({tags})\b[^>]*>.*?(</\1\s*>|$)".format(tags="|".join(DISCARDED_CONTENT_TAGS)),
    re.IGNORECASE | re.DOTALL,
)

EXCERPT_TAGS: List[str] = ["p"]
EXCERPT_LENGTH = 100
EXCERPT_SUFFIX = "..."

FALLBACK_IMAGES: List[str] = ["img1.jpg", "img2.jpg", "img3.jpg", "img4.jpg", "img5.jpg"]
IMAGE_TAG_PATTERN = re.compile(r"<img[^>]*src=[^>]*>")


def sanitize_post_body(body: str) -> str:
    """
    Clean a post body against the post allow-list.

    `<script>`, `<style>`, `<textarea>` and `<noscript>` elements are dropped
    with their content (an unclosed one swallows the rest of the body). Other
    disallowed tags are stripped while their text content is kept. Attributes
    are filtered per tag and link/image URLs are restricted to the `data` and
    `http` schemes.
    """
    return bleach.clean(
        DISCARDED_CONTENT_PATTERN.sub("", body),
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )


def extract_thumbnail(
    body: Optional[str],
    base_url: str,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Derive the representative image tag of a post body.

    The first `<img ... src=...>` tag found in `body` is returned verbatim.
    When the body has none (or is `None`), one of the fallback images is chosen
    uniformly at random and wrapped in an `<img>` tag pointing at `base_url`.

    Args:
        body: Post body HTML.
        base_url: URL prefix of the fallback images, e.g. `http://localhost:4000/`.
        rng: Random source. Pass a seeded `random.Random` for reproducible output.

    Returns:
        str: An `<img>` tag, never empty.
    """
    if body:
        match = IMAGE_TAG_PATTERN.search(body)
        if match is not None:
            return match.group(0)

    chooser = rng or random
    image_src = base_url + chooser.choice(FALLBACK_IMAGES)
    return f'<img src="{image_src}"/>'


def build_excerpt(body: str, length: int = EXCERPT_LENGTH) -> str:
    """
    Build the listing preview of a post body.

    Every tag except `<p>` is removed. Paragraph markup counts toward the
    length. Bodies shorter than `length` come back unchanged, longer ones are
    cut at `length` characters and suffixed with `...`.
    """
    filtered = bleach.clean(body or "", tags=EXCERPT_TAGS, attributes={}, strip=True)
    if len(filtered) < length:
        return filtered
    return f"{filtered[:length]}{EXCERPT_SUFFIX}"
