#!/usr/bin/env python3
"""
🎨 CHARMI - Error Types
=======================
Copyright (c) 2025 PNGN-Tec LLC

Exception hierarchy shared by every CHARMI module.

All errors derive from ValueError so callers that already guard
configuration and input validation with ``except ValueError`` keep working.

Hierarchy
=========
- CharmiError
  - DecodeError (decoding is all-or-nothing; any of these aborts the call)
    - UnknownColorName
    - InvalidColorDefinition
    - MaskShapeMismatch
    - InvalidCharacterStream
    - MalformedDefinition
  - InvalidDimensions
  - EmptyAnimation
  - NonPositiveDuration
"""

from typing import Optional


class CharmiError(ValueError):
    """Base class for all CHARMI errors"""


# ============================================================================
# DECODE ERRORS
# ============================================================================

class DecodeError(CharmiError):
    """Raised when a definition cannot be turned into an image or actor"""


class UnknownColorName(DecodeError):
    """A mask character is not a key of the active palette"""

    def __init__(self, token: str, row: Optional[int] = None, col: Optional[int] = None):
        self.token = token
        self.row = row
        self.col = col
        where = f" at row {row}, column {col}" if row is not None else ""
        super().__init__(f"Unknown color name {token!r}{where}")


class InvalidColorDefinition(DecodeError):
    """A palette entry is neither an ANSI index, an RGB triple nor a known name"""

    def __init__(self, definition, reason: str = ""):
        self.definition = definition
        message = f"Invalid color definition {definition!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MaskShapeMismatch(DecodeError):
    """A color mask layer does not line up with the glyph layer"""

    def __init__(self, layer: str, message: str):
        self.layer = layer
        super().__init__(f"{layer} mask: {message}")


class InvalidCharacterStream(DecodeError):
    """Input text is not valid UTF-8 or holds characters a cell cannot carry"""


class MalformedDefinition(DecodeError):
    """The TOML document is unreadable or has fields of the wrong type"""


# ============================================================================
# CONSTRUCTION ERRORS
# ============================================================================

class InvalidDimensions(CharmiError):
    """A fixed image was given a zero/negative size or content that does not fit"""


class EmptyAnimation(CharmiError):
    """An animation was built from zero frames"""


class NonPositiveDuration(CharmiError):
    """A frame duration is zero, negative or not a finite number"""

    def __init__(self, index: int, duration):
        self.index = index
        self.duration = duration
        super().__init__(f"Frame {index} has non-positive duration {duration!r}")
