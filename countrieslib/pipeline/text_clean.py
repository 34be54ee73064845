import re

from countrieslib.config import settings

# Patterns to remove
_SCRIPT_STYLE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_HTML_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_HTML_TAG = re.compile(r"<[^>]+>")
_MULTI_SPACE = re.compile(r"\s+")


def trim_html(body, max_length: int | None = None):
    """Strip markup from an error response body and truncate it for logging.

    Non-string bodies (None, parsed JSON) are returned unchanged.
    """
    if not isinstance(body, str):
        return body
    if max_length is None:
        max_length = settings.OUTBOUND_BODY_MAX_LENGTH

    text = _SCRIPT_STYLE.sub(" ", body)
    text = _HTML_COMMENT.sub(" ", text)
    text = _HTML_TAG.sub(" ", text)
    text = _MULTI_SPACE.sub(" ", text).strip()
    if len(text) > max_length:
        text = text[:max_length] + "..."
    return text
