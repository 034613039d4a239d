"""
PII (Personally Identifiable Information) sanitization utility.

Redacts phone numbers and email addresses from text before it reaches
the logs. WhatsApp conversation ids are phone numbers, so every log line
that mentions a conversation goes through here.
"""
import re


# Regex patterns for PII detection
PHONE_PATTERN = re.compile(
    r"""
    (?:
        \+?\d{1,3}[-.\s]?       # Country code
        (?:\(\d{1,4}\)|\d{1,4}) # Area code
        [-.\s]?\d{1,4}          # First part
        [-.\s]?\d{1,4}          # Second part
        [-.\s]?\d{1,9}          # Last part
    )
    """,
    re.VERBOSE
)

EMAIL_PATTERN = re.compile(
    r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b"
)


def sanitize_phone_number(text: str) -> str:
    """
    Redact phone numbers from text.

    Args:
        text: Input text that may contain phone numbers

    Returns:
        Text with phone numbers replaced with [PHONE_REDACTED]
    """
    return PHONE_PATTERN.sub("[PHONE_REDACTED]", text)


def sanitize_email(text: str) -> str:
    """
    Redact email addresses from text.

    Args:
        text: Input text that may contain emails

    Returns:
        Text with emails replaced with [EMAIL_REDACTED]
    """
    return EMAIL_PATTERN.sub("[EMAIL_REDACTED]", text)


def sanitize_text(text: str) -> str:
    """
    Apply all PII sanitization rules to text.

    Example:
        >>> sanitize_text("Reply to +92-300-1234567 or me@example.com")
        "Reply to [PHONE_REDACTED] or [EMAIL_REDACTED]"
    """
    if not isinstance(text, str):
        return text

    # Emails first so the local part isn't mistaken for digits
    text = sanitize_email(text)
    return sanitize_phone_number(text)
