import html
import re
from typing import Any, Optional

import bleach

# Tags an article body may keep
ARTICLE_ALLOWED_TAGS = [
    "p",
    "br",
    "strong",
    "em",
    "u",
    "a",
    "ul",
    "ol",
    "li",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "blockquote",
    "code",
    "pre",
    "img",
    "figure",
    "figcaption",
]

ARTICLE_ALLOWED_ATTRIBUTES = {
    "a": ["href", "title", "target", "rel"],
    "img": ["src", "alt", "title"],
    "*": ["class"],
}

CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def sanitize_html(html_content: Optional[str], allowed_tags: Optional[list] = None) -> Optional[str]:
    """
    Sanitize rich HTML (article bodies, newsletter content) against an allow-list.
    Disallowed tags are stripped, not escaped.
    """
    if html_content is None:
        return None

    return bleach.clean(
        html_content,
        tags=allowed_tags or ARTICLE_ALLOWED_TAGS,
        attributes=ARTICLE_ALLOWED_ATTRIBUTES,
        protocols=["http", "https", "mailto"],
        strip=True,
    )


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Escape HTML special characters in plain text fields to prevent XSS.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(CONTROL_CHARS.sub("", value), quote=True)


def sanitize_dict(data: dict[str, Any], fields: Optional[list[str]] = None) -> dict[str, Any]:
    """
    Sanitize string values of a dictionary, recursing into nested dicts and lists.
    If fields is None, sanitizes all string values.
    """
    if not data:
        return data

    sanitized = {}
    for key, value in data.items():
        if fields is not None and key not in fields:
            sanitized[key] = value
        elif isinstance(value, str):
            sanitized[key] = sanitize_string(value)
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, fields)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_dict(item, fields)
                if isinstance(item, dict)
                else sanitize_string(item) if isinstance(item, str) else item
                for item in value
            ]
        else:
            sanitized[key] = value

    return sanitized
