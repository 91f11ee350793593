"""Text processing utilities."""
import html
import re
from bs4 import BeautifulSoup


def strip_html(markup: str) -> str:
    """
    Convert HTML to plain text by removing tags, scripts and styles.

    Args:
        markup: HTML content to convert

    Returns:
        Whitespace-normalized plain text
    """
    if not markup:
        return ""

    soup = BeautifulSoup(markup, 'html.parser')

    for script in soup(["script", "style"]):
        script.decompose()

    text = soup.get_text(' ')
    return re.sub(r'\s+', ' ', text).strip()


def make_snippet(markup: str, max_chars: int = 200) -> str:
    """Plain-text synopsis: tags stripped, cut to ``max_chars``, entities decoded."""
    text = strip_html(markup)
    snippet = html.unescape(text[:max_chars].strip())
    if len(text) > max_chars:
        snippet += '...'
    return snippet


def clean_title(title: str) -> str:
    if not title:
        return ""
    return re.sub(r'\s+', ' ', html.unescape(title)).strip()
