# services/translation/token_protector.py
"""
Mask code identifiers before a fragment goes to a translation provider and
put them back afterwards.

Providers happily "translate" ``console.log`` or ``print`` into Russian, so
anything that looks like code is swapped for an opaque ``@@CODE_<n>@@``
placeholder first.  ``restore`` is a literal substitution and therefore
round-trips the protected tokens exactly, whatever happened to the prose
around them.
"""

import re
from typing import List, Tuple

Replacements = List[Tuple[str, str]]

PLACEHOLDER_TEMPLATE = "@@CODE_{index}@@"

DOTTED_IDENT_RE = re.compile(r"\b[A-Za-z_][A-Za-z0-9_]*\.[A-Za-z_][A-Za-z0-9_]*\b")
CALL_IDENT_RE = re.compile(r"\b([A-Za-z_][A-Za-z0-9_]*)\s*\(")

CODE_WORDS = (
    # JavaScript
    "console", "console.log", "document", "window", "getElementById", "querySelector",
    "function", "return", "let", "const", "var", "class", "new", "import", "from",
    "export", "async", "await", "Promise",
    # Python
    "print", "printf", "def", "None", "True", "False", "list", "dict", "tuple", "set",
    "str", "int", "float", "bool",
    # Common
    "HTTP", "URL", "JSON", "API", "Node.js", "React",
)

_CODE_WORD_RES = tuple((word, re.compile(rf"\b{re.escape(word)}\b")) for word in CODE_WORDS)


def _whole_word(token: str) -> re.Pattern:
    # Never match inside an already placed @@CODE_n@@ marker.
    return re.compile(rf"(?<!@)\b{re.escape(token)}\b(?!@)")


def find_code_tokens(text: str) -> List[str]:
    """Distinct code-like tokens in ``text``, in discovery order."""
    found: List[str] = []

    def add(token: str) -> None:
        if token and token not in found:
            found.append(token)

    for m in DOTTED_IDENT_RE.finditer(text):
        add(m.group(0))
    for m in CALL_IDENT_RE.finditer(text):
        add(m.group(1))
    for word, pattern in _CODE_WORD_RES:
        if pattern.search(text):
            add(word)
    return found


def protect(text: str) -> Tuple[str, Replacements]:
    """Return ``(masked_text, [(placeholder, token), ...])``."""
    src = text or ""
    if not src:
        return src, []

    tokens = find_code_tokens(src)
    if not tokens:
        return src, []

    # Longest first, so "console.log" is masked before "console".
    tokens.sort(key=len, reverse=True)

    out = src
    replacements: Replacements = []
    for index, token in enumerate(tokens):
        placeholder = PLACEHOLDER_TEMPLATE.format(index=index)
        out, count = _whole_word(token).subn(placeholder, out)
        if count:
            replacements.append((placeholder, token))
    return out, replacements


def restore(text: str, replacements: Replacements) -> str:
    out = text or ""
    for placeholder, token in replacements:
        out = out.replace(placeholder, token)
    return out
