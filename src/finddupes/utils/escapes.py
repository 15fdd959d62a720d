"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/escapes.py
Decodes C-style escape sequences in separator strings given on the command line.

Examples:
    unescape(r"\\n")    → "\\n"
    unescape(r"\\x2c")  → ","
    unescape(r"\\054")  → ","
    unescape(r"\\q")    → "\\\\q"  (unknown escapes are kept as written)
"""

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
    "?": "?",
}

_HEX_DIGITS = "0123456789abcdefABCDEF"
_OCT_DIGITS = "01234567"


def unescape(text: str) -> str:
    """
    Decode escape sequences.

    Raises:
        ValueError: on a \\x escape without exactly two hex digits, or an octal
                    escape without exactly three octal digits.
    """
    out = []
    i = 0
    n = len(text)

    while i < n:
        c = text[i]
        i += 1
        if c != "\\":
            out.append(c)
            continue

        if i >= n:
            # trailing lone backslash
            out.append("\\")
            break

        c = text[i]
        i += 1

        if c in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[c])
        elif c == "x":
            digits = text[i:i + 2]
            if len(digits) != 2 or any(d not in _HEX_DIGITS for d in digits):
                raise ValueError(f"Invalid hex escape in '{text}'")
            out.append(chr(int(digits, 16)))
            i += 2
        elif c in _OCT_DIGITS:
            digits = c + text[i:i + 2]
            if len(digits) != 3 or any(d not in _OCT_DIGITS for d in digits):
                raise ValueError(f"Invalid octal escape in '{text}'")
            out.append(chr(int(digits, 8)))
            i += 2
        else:
            out.append("\\" + c)

    return "".join(out)
