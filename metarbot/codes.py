from __future__ import annotations

CODE_LENGTHS = (3, 4)


def get_airport_codes(text: str) -> list[str]:
    """Split a chat message into uppercase airport code candidates.

    A message of exactly 3 or 4 characters is taken as a single code. Anything
    else is split on commas, or on whitespace when there is no comma. Text made
    of delimiters only has no codes.
    """
    text = (text or "").strip()
    if not text.replace(",", " ").strip():
        return []
    if len(text) in CODE_LENGTHS:
        pieces = [text]
    else:
        pieces = text.split(",")
        if len(pieces) <= 1:
            pieces = text.split()

    codes = []
    for piece in pieces:
        code = piece.strip().upper()
        if code:
            codes.append(code)
    return codes
