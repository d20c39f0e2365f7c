#!/usr/bin/env python3
"""
🎨 CHARMI - Width Calculation Module
====================================
Copyright (c) 2025 PNGN-Tec LLC

Character Width Lookup
======================
Terminal column widths of single characters. Every cell decision in
CHARMI (wide-character obscuring, mask alignment, gap and palette key
choice) goes through char_width(), so a character is measured by wcwidth
once and served from a cache afterwards.

Widths
------
    -1  control characters (C0, DEL, C1); a cell can never hold them
     0  zero-width characters such as combining marks
     1  ordinary characters
     2  wide characters (CJK, most emoji)

Caching
-------
ASCII and the common combining ranges are seeded up front and never
evicted. Everything else goes into an LRU cache sized by
CacheConfig.default_size. The default calculator is rebuilt whenever the
configuration is reloaded so a new cache size takes effect.
"""

import threading
import logging
from typing import Dict, Optional
from collections import OrderedDict

from wcwidth import wcwidth

from charmi_config import CharmiSystemConfig, get_cache_config, register_config_callback

# Configure logging
logger = logging.getLogger('charmi.width')

# Ranges whose width is known without asking wcwidth
_ZERO_WIDTH_RANGES = (
    (0x0300, 0x036F),  # Combining diacritical marks
    (0x1AB0, 0x1AFF),  # Combining diacritical marks extended
    (0x1DC0, 0x1DFF),  # Combining diacritical marks supplement
    (0x20D0, 0x20FF),  # Combining diacritical marks for symbols
    (0xFE20, 0xFE2F),  # Combining half marks
)


def _is_control(code: int) -> bool:
    return code < 32 or 0x7f <= code < 0xa0


def _seed_widths() -> Dict[int, int]:
    seed = {code: 1 for code in range(32, 127)}
    for start, end in _ZERO_WIDTH_RANGES:
        for code in range(start, end + 1):
            seed[code] = 0
    return seed


class WidthCalculator:
    """
    Thread-safe character width lookup with an LRU cache.

    Attributes:
        hits: Lookups answered from the seed table or the cache
        misses: Lookups that had to ask wcwidth
    """

    def __init__(self, cache_size: Optional[int] = None, enable_cache: Optional[bool] = None):
        """
        Args:
            cache_size: Maximum cached codepoints outside the seed table
                (uses config if None)
            enable_cache: Cache wcwidth results (uses config if None)
        """
        cache_config = get_cache_config()
        self._cache_size = cache_config.default_size if cache_size is None else cache_size
        self._cache_enabled = cache_config.enable_caching if enable_cache is None else enable_cache

        self._seed = _seed_widths()
        self._cache: 'OrderedDict[int, int]' = OrderedDict()
        self._lock = threading.Lock()

        self.hits = 0
        self.misses = 0

        logger.debug(f"WidthCalculator ready: cache_size={self._cache_size}, "
                     f"cache_enabled={self._cache_enabled}")

    def char_width(self, char: str) -> int:
        """
        Get the column width of a single character.

        Args:
            char: Exactly one character

        Returns:
            -1 for control characters, 0 for zero-width characters,
            otherwise 1 or 2
        """
        if len(char) != 1:
            raise ValueError(f"Expected a single character, got {char!r}")

        code = ord(char)
        if _is_control(code):
            return -1
        if code in self._seed:
            self.hits += 1
            return self._seed[code]

        with self._lock:
            if code in self._cache:
                self._cache.move_to_end(code)
                self.hits += 1
                return self._cache[code]

        self.misses += 1
        width = wcwidth(char)
        if self._cache_enabled:
            with self._lock:
                self._cache[code] = width
                while len(self._cache) > self._cache_size:
                    self._cache.popitem(last=False)
        return width

    def clear_cache(self):
        """Forget every cached width (the seed table stays)"""
        with self._lock:
            self._cache.clear()


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

_default_calculator = None
_calculator_lock = threading.Lock()

def get_default_calculator() -> WidthCalculator:
    """Return the shared calculator, creating it on first use"""
    global _default_calculator

    if _default_calculator is None:
        with _calculator_lock:
            if _default_calculator is None:
                _default_calculator = WidthCalculator()

    return _default_calculator


def char_width(char: str) -> int:
    """
    Get column width of one character using the default calculator.

    Example:
        >>> char_width("A")
        1
        >>> char_width("你")
        2
    """
    return get_default_calculator().char_width(char)


def clear_default_cache():
    """Clear the default calculator's cache."""
    if _default_calculator is not None:
        _default_calculator.clear_cache()


def _on_config_change(old_config: CharmiSystemConfig, new_config: CharmiSystemConfig):
    global _default_calculator

    if old_config.cache != new_config.cache:
        with _calculator_lock:
            _default_calculator = None
        logger.info("Width cache settings changed, default calculator reset")


register_config_callback(_on_config_change)
