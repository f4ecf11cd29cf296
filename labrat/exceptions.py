"""
Custom exceptions for labrat.

Error philosophy:
  - ParseError          → a page did not have the shape an assembler expects.
                          Every subclass except ContentGated means the site's
                          markup changed and an extractor needs updating.
  - ContentGated        → the site refused to show mature/adult content.
                          A policy condition, not a markup bug; callers must
                          special-case it.
  - UrlKeyError         → a URL does not belong to the key family it was
                          parsed as.
  - ContractViolation   → markup contradicted itself (e.g. both "fav" and
                          "unfav" links). Fatal, never folded.
  - UnauthenticatedError → a value that only exists for logged-in sessions
                          was requested from a page fetched without one.

InvalidInteger and MalformedUrl are shared by the key codec and the
extraction engine, so they derive from both ParseError and UrlKeyError.
"""

from typing import Optional


class LabratError(Exception):
    """Base exception for all labrat errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly error record."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


# --- Extraction failures ---

class ParseError(LabratError):
    """Raised when a document cannot be reduced to a record."""
    pass


class UrlKeyError(LabratError):
    """Raised when a URL cannot be parsed into a typed key."""
    pass


class MissingElement(ParseError):
    """A mandatory selector matched nothing."""

    def __init__(self, selector: str):
        super().__init__(f"no element matches {selector!r}", {"selector": selector})
        self.selector = selector


class MissingAttribute(ParseError):
    """An element lacks a mandatory attribute."""

    def __init__(self, attribute: str):
        super().__init__(f"missing attribute {attribute!r}", {"attribute": attribute})
        self.attribute = attribute


class MalformedUrl(ParseError, UrlKeyError):
    """Text that should be (or resolve to) an absolute URL is not one."""

    def __init__(self, url: str):
        super().__init__(f"malformed url {url!r}", {"url": url})
        self.url = url


class IncorrectUrl(ParseError):
    """A well-formed URL with the wrong path or fragment structure."""

    def __init__(self, url: str):
        super().__init__(f"unexpected url structure {url!r}", {"url": url})
        self.url = url


class InvalidInteger(ParseError, UrlKeyError):
    """Text that should be an unsigned integer is not."""

    def __init__(self, text: str):
        super().__init__(f"invalid integer {text!r}", {"text": text})
        self.text = text


class InvalidDate(ParseError):
    """A timestamp element holds neither a parseable title nor text."""

    def __init__(self, text: str):
        super().__init__(f"invalid date {text!r}", {"text": text})
        self.text = text


class UnknownRating(ParseError):
    """Rating text other than General, Mature or Adult."""

    def __init__(self, text: str):
        super().__init__(f"unknown rating {text!r}", {"text": text})
        self.text = text


class InvalidDepth(ParseError):
    """A comment's width style cannot be decoded into a nesting depth."""

    def __init__(self, style: str):
        super().__init__(f"invalid depth style {style!r}", {"style": style})
        self.style = style


class MalformedEmbeddedData(ParseError):
    """The inline script metadata could not be decoded."""
    pass


class ContentGated(ParseError):
    """The site blocked the page behind its mature/adult content filter."""

    def __init__(self):
        super().__init__("adult/mature content is currently blocked")


# --- Key codec failures ---

class MissingSegment(UrlKeyError):
    """The URL path is too short or has the wrong literal segment."""

    def __init__(self, url: str):
        super().__init__(f"missing or unexpected segment in {url!r}", {"url": url})
        self.url = url


# --- Fatal / policy errors ---

class ContractViolation(LabratError):
    """
    The markup contradicts an invariant the assemblers rely on.

    Not a ParseError: it must never be folded into an optional field.
    """
    pass


class UnauthenticatedError(LabratError):
    """Raised when asking a page for a value only logged-in users get."""

    def __init__(self, what: str):
        super().__init__(f"{what} requires an authenticated session", {"what": what})
