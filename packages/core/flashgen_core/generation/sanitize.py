"""Input sanitization for user-supplied source text.

This reduces the chance that pasted text is read by the model as
instructions. It is defense in depth only and must not be relied on as a
security boundary.
"""

import re

_CODE_FENCE = re.compile(r"```")

# Chat-template sentinels used by common instruction-tuned models
_TEMPLATE_TOKENS = re.compile(
    r"\[/?INST\]"
    r"|<</?SYS>>"
    r"|<\|(?:im_start|im_end|system|user|assistant|endoftext)\|>",
    re.IGNORECASE,
)

_BRACKETED_ROLES = re.compile(r"\[/?(?:system|assistant|user)\]", re.IGNORECASE)

_ROLE_PREFIXES = re.compile(
    r"^[ \t]*(?:system|assistant|user)[ \t]*:", re.IGNORECASE | re.MULTILINE
)

_EXCESS_NEWLINES = re.compile(r"\n{3,}")

# Everything in C0 plus DEL, except tab (\x09) and newline (\x0a)
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")


def _sanitize_once(text: str) -> str:
    text = text.strip()
    text = _CODE_FENCE.sub("", text)
    text = _TEMPLATE_TOKENS.sub("", text)
    text = _BRACKETED_ROLES.sub("", text)
    text = _ROLE_PREFIXES.sub("", text)
    text = _CONTROL_CHARS.sub("", text)
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    return text.strip()


def sanitize_text(text: str) -> str:
    """Strip prompt-injection markers from source text.

    Removes code fences, chat-template sentinels, role markers and control
    characters (other than newline and tab), and collapses runs of three or
    more newlines to two. The rules run until nothing changes, so removing
    one marker cannot leave another one behind and
    ``sanitize_text(sanitize_text(x)) == sanitize_text(x)``.

    Args:
        text: Raw user text

    Returns:
        Sanitized text
    """
    while True:
        cleaned = _sanitize_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned
