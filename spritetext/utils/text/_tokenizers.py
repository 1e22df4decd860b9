import re


# Newlines are matched one at a time, because each one starts a new line.
# Whitespace excludes the newline, so it stays on the line it ends.
KINDS = "nl", "ws", "word"
PATTERN = re.compile(r"(\n)|([ \r\f\t]+)|(\w+)")


def tokenize_text(text):
    """Split the text in pieces of "nl", "ws", "word", and "other".

    Yields (kind, start_index, piece) tuples that together cover the text.
    """
    pos = 0
    for match in PATTERN.finditer(text):
        start = match.start()
        if start > pos:
            yield "other", pos, text[pos:start]
        yield KINDS[match.lastindex - 1], start, match.group()
        pos = match.end()
    if pos < len(text):
        yield "other", pos, text[pos:]
