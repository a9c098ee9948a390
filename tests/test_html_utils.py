"""
Tests for body sanitization, thumbnail extraction and listing excerpts.
"""
import random

from blog_backend.utils.html_utils import (
    FALLBACK_IMAGES,
    build_excerpt,
    extract_thumbnail,
    sanitize_post_body,
)

BASE_URL = "http://localhost:4000/"


def test_sanitize_strips_disallowed_tags_but_keeps_text():
    cleaned = sanitize_post_body("<p>Hello <script>alert(1)</script><em>world</em></p>")

    assert "<script>" not in cleaned
    assert "<em>" not in cleaned
    assert cleaned.startswith("<p>Hello ")
    assert "world" in cleaned


def test_sanitize_drops_script_and_style_content():
    cleaned = sanitize_post_body(
        "<p>keep</p><script>steal(document.cookie)</script><STYLE type='text/css'>p {color: red}</STYLE><p>me</p>"
    )

    assert cleaned == "<p>keep</p><p>me</p>"


def test_sanitize_drops_unclosed_script_to_end_of_body():
    cleaned = sanitize_post_body("<p>before</p><script>alert(1)<p>after</p>")

    assert cleaned == "<p>before</p>"


def test_sanitize_filters_attributes_and_protocols():
    cleaned = sanitize_post_body(
        '<p onclick="steal()">x</p><a href="javascript:alert(1)" target="_blank">link</a>'
    )

    assert "onclick" not in cleaned
    assert "javascript" not in cleaned
    assert 'target="_blank"' in cleaned


def test_sanitize_keeps_allowed_markup():
    body = '<h1>Title</h1><pre class="ql-syntax" spellcheck="false">code</pre><img src="http://x/a.png">'

    cleaned = sanitize_post_body(body)

    assert "<h1>Title</h1>" in cleaned
    assert 'class="ql-syntax"' in cleaned
    assert '<img src="http://x/a.png">' in cleaned


def test_extract_thumbnail_returns_first_image_tag_verbatim():
    body = '<p>intro</p><img src="http://x/first.png"><img src="http://x/second.png">'

    assert extract_thumbnail(body, BASE_URL) == '<img src="http://x/first.png">'


def test_extract_thumbnail_falls_back_to_seeded_choice():
    expected = random.Random(3).choice(FALLBACK_IMAGES)

    thumbnail = extract_thumbnail("<p>no pictures here</p>", BASE_URL, random.Random(3))

    assert thumbnail == f'<img src="{BASE_URL}{expected}"/>'


def test_extract_thumbnail_handles_missing_body():
    thumbnail = extract_thumbnail(None, BASE_URL, random.Random(1))

    assert thumbnail.startswith(f'<img src="{BASE_URL}img')
    assert thumbnail.endswith('.jpg"/>')


def test_build_excerpt_truncates_long_bodies():
    excerpt = build_excerpt("a" * 150)

    assert len(excerpt) == 103
    assert excerpt == "a" * 100 + "..."


def test_build_excerpt_keeps_short_bodies():
    body = "<p>" + "b" * 50 + "</p>"

    assert build_excerpt(body) == body


def test_build_excerpt_keeps_only_paragraph_markup():
    excerpt = build_excerpt('<h1>Heading</h1><p>Text <img src="http://x/a.png"></p>')

    assert excerpt == "Heading<p>Text </p>"
