"""Emphasis delimiter repair for generated Markdown.

Implements the CommonMark left/right-flanking test and moves emphasis
delimiters inward until they wrap text that parses back to the same span.
See: https://spec.commonmark.org/0.29/#emphasis-and-strong-emphasis
"""

from dataclasses import dataclass, replace

ASCII_PUNCTUATION = frozenset("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")


@dataclass(frozen=True)
class Span:
    """Delimited emphasis run inside a larger text.

    ``start`` is the offset of the opening delimiter and ``end`` the offset
    of the closing delimiter, so the wrapped content is
    ``text[start + len(delim):end]``.
    """

    text: str
    start: int
    end: int


def _char_at(text: str, index: int) -> str:
    # Out-of-range offsets yield "", which is neither whitespace nor punctuation.
    if 0 <= index < len(text):
        return text[index]
    return ""


def _is_whitespace(char: str) -> bool:
    return char.isspace()


def _is_punctuation(char: str) -> bool:
    return char in ASCII_PUNCTUATION


def can_delimiter_be_used(text: str, pos: int, is_opening: bool) -> bool:
    """Check whether a delimiter at ``pos`` may open or close emphasis.

    Characters outside the string count as whitespace, so position 0 always
    has whitespace before it and the last position always has whitespace
    after it.

    Args:
        text: Text containing the delimiter
        pos: Offset of the delimiter character
        is_opening: True to test left-flanking, False for right-flanking

    Returns:
        True if the delimiter is flanking on the requested side
    """
    prev_char = " " if pos == 0 else _char_at(text, pos - 1)
    next_char = " " if pos == len(text) - 1 else _char_at(text, pos + 1)

    if is_opening:
        if _is_whitespace(next_char):
            return False
        return not _is_punctuation(next_char) or (
            _is_whitespace(prev_char) or _is_punctuation(prev_char)
        )

    if _is_whitespace(prev_char):
        return False
    return not _is_punctuation(prev_char) or (
        _is_whitespace(next_char) or _is_punctuation(next_char)
    )


def shift_delim(text: str, delim: str, start: int, offset: int) -> str:
    """Move the delimiter at ``start`` by ``offset`` characters.

    The token is cut out first and reinserted in the shortened string, so a
    positive offset moves it past ``offset`` characters of content.
    """
    res = text[:start] + text[start + len(delim) :]
    return res[: start + offset] + delim + res[start + offset :]


def trim_start(span: Span, delim: str) -> Span:
    """Walk the opening delimiter right until it is left-flanking.

    The last character of the run is checked, since that is the one next to
    the wrapped content.
    """
    text, pos = span.text, span.start
    last = len(delim) - 1
    while pos < span.end:
        if can_delimiter_be_used(text, pos + last, True):
            break
        text = shift_delim(text, delim, pos, 1)
        pos += 1
    return Span(text=text, start=pos, end=span.end)


def trim_end(span: Span, delim: str) -> Span:
    """Walk the closing delimiter left until it is right-flanking.

    The first character of the run is the one next to the content.
    """
    text, pos = span.text, span.end
    while pos > span.start:
        if can_delimiter_be_used(text, pos, False):
            break
        text = shift_delim(text, delim, pos, -1)
        pos -= 1
    return replace(span, text=text, end=pos)


def trim_inline(text: str, delim: str, start: int, end: int) -> str:
    """Shrink an emphasis span until both delimiters are flanking.

    If nothing is left between the delimiters the pair is dropped entirely,
    since an empty emphasis would not survive a parse.

    Args:
        text: Markdown text containing the span
        delim: Delimiter token, e.g. ``*`` or ``**``
        start: Offset of the opening delimiter
        end: Offset of the closing delimiter

    Returns:
        Text with the delimiters repositioned or removed
    """
    span = trim_start(Span(text=text, start=start, end=end), delim)
    span = trim_end(span, delim)

    if span.end - span.start < len(delim) + 1:
        return span.text[: span.start] + span.text[span.end + len(delim) :]

    return span.text
