#!/usr/bin/env python3
"""
🎨 CHARMI - Configuration Module
================================
Copyright (c) 2025 PNGN-Tec LLC

Centralized Configuration System
================================
Complete configuration for character-map image decoding and rendering:
- Width cache sizing for the display-width calculator
- Decoder defaults (gap character, row trimming)
- Terminal color support level for line rendering
- Preview rasterisation settings (cell size, fonts, default colors, fps)
- The 16 system colors used when a color has to become RGB

Configuration Overview
======================
Settings live in dataclasses grouped under CharmiSystemConfig and are
served by a thread-safe singleton ConfigurationManager. Environment
variables override the defaults at startup and on reload():

    CHARMI_CACHE_SIZE      width cache entries
    CHARMI_GAP             default gap character
    CHARMI_COLOR_SUPPORT   truecolor | ansi256 | basic | plain
    CHARMI_CELL_WIDTH      preview cell width in pixels
    CHARMI_CELL_HEIGHT     preview cell height in pixels
    CHARMI_FPS             preview frames per second
    CHARMI_DEBUG           true/1/yes enables debug mode
    CHARMI_LOG_LEVEL       logging level name for the example tools

NO_COLOR (https://no-color.org) forces plain output when
CHARMI_COLOR_SUPPORT is not set.
"""

import threading
import logging
import os
from typing import Tuple, Dict, Any, Optional, Callable
from dataclasses import dataclass, field
from enum import Enum

# Configure logging
logger = logging.getLogger('charmi.config')

# Type alias for RGB colors
RGBColor = Tuple[int, int, int]

# ============================================================================
# DECODER DEFAULTS
# ============================================================================

DEFAULT_GAP_CHAR = ' '

# Character that never means anything but "no color" in a mask layer
MASK_BLANK_CHAR = ' '

# ============================================================================
# CONFIGURATION ENUMS
# ============================================================================

class ColorSupportLevel(Enum):
    """How many colors the target terminal can show"""
    TRUE_COLOR = "truecolor"
    ANSI_256 = "ansi256"
    BASIC = "basic"
    PLAIN = "plain"


# ============================================================================
# CACHE CONFIGURATION
# ============================================================================

@dataclass
class CacheConfig:
    """
    Cache configuration for the character width calculator.

    Attributes:
        default_size: Maximum number of cached codepoints
        enable_caching: Master switch for caching
    """

    default_size: int = 1000
    enable_caching: bool = True

    def validate(self) -> bool:
        """Validate cache configuration"""
        if self.default_size <= 0:
            raise ValueError("Cache size must be positive")
        return True


# ============================================================================
# DECODER CONFIGURATION
# ============================================================================

@dataclass
class DecoderConfig:
    """Defaults applied while decoding definitions"""

    # Used when a definition does not set values.gap
    default_gap: str = DEFAULT_GAP_CHAR

    # Drop trailing transparent cells from flexible rows
    trim_flexible_rows: bool = True

    def validate(self) -> bool:
        """Validate decoder configuration"""
        if not isinstance(self.default_gap, str) or len(self.default_gap) != 1:
            raise ValueError("Default gap must be exactly one character")
        return True


# ============================================================================
# RENDERING CONFIGURATION
# ============================================================================

@dataclass
class RenderConfig:
    """Terminal line rendering configuration"""

    color_support: ColorSupportLevel = ColorSupportLevel.TRUE_COLOR

    # Emit a reset at the end of every styled line
    reset_each_line: bool = True

    def validate(self) -> bool:
        """Validate rendering configuration"""
        if not isinstance(self.color_support, ColorSupportLevel):
            raise ValueError("color_support must be a ColorSupportLevel")
        return True


@dataclass
class PreviewConfig:
    """Pixel preview (PNG/GIF) configuration"""

    # Pixel size of one terminal cell
    cell_width: int = 8
    cell_height: int = 16

    # Font settings
    font_size: int = 14
    font_path: Optional[str] = None

    # Colors used where a cell sets none
    default_fg: RGBColor = (229, 229, 229)
    default_bg: RGBColor = (0, 0, 0)

    # Sampling rate for animation previews
    fps: int = 12

    def validate(self) -> bool:
        """Validate preview configuration"""
        if self.cell_width <= 0 or self.cell_height <= 0:
            raise ValueError("Cell dimensions must be positive")
        if self.font_size <= 0:
            raise ValueError("Font size must be positive")
        if self.fps <= 0:
            raise ValueError("Preview fps must be positive")
        for rgb in (self.default_fg, self.default_bg):
            if len(rgb) != 3 or any(not 0 <= c <= 255 for c in rgb):
                raise ValueError(f"Invalid default color {rgb!r}")
        return True


# ============================================================================
# MAIN CONFIGURATION CLASS
# ============================================================================

@dataclass
class CharmiSystemConfig:
    """Complete system configuration"""

    # Sub-configurations
    cache: CacheConfig = field(default_factory=CacheConfig)
    decoder: DecoderConfig = field(default_factory=DecoderConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    preview: PreviewConfig = field(default_factory=PreviewConfig)

    # System-wide settings
    debug_mode: bool = False
    log_level: str = "INFO"

    def validate(self) -> bool:
        """Validate entire configuration"""
        self.cache.validate()
        self.decoder.validate()
        self.render.validate()
        self.preview.validate()
        if logging.getLevelName(self.log_level.upper()) == f"Level {self.log_level.upper()}":
            raise ValueError(f"Unknown log level {self.log_level!r}")
        return True


# ============================================================================
# CONFIGURATION MANAGER (SINGLETON)
# ============================================================================

class ConfigurationManager:
    """
    Singleton configuration manager with runtime reloading.
    Thread-safe management of global configuration with change notifications.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._config = self._startup_config()
        self._callbacks = []
        self._config_lock = threading.RLock()

        self._initialized = True
        logger.info("Configuration manager initialized")

    @classmethod
    def _startup_config(cls) -> CharmiSystemConfig:
        """Defaults plus environment overrides, or plain defaults if those are invalid"""
        config = CharmiSystemConfig()
        try:
            cls._load_environment_overrides(config)
            config.validate()
        except ValueError as e:
            logger.warning(f"Ignoring invalid environment configuration: {e}")
            config = CharmiSystemConfig()
        return config

    @staticmethod
    def _load_environment_overrides(config: CharmiSystemConfig):
        """Apply overrides from environment variables onto config"""

        # Cache settings
        if 'CHARMI_CACHE_SIZE' in os.environ:
            config.cache.default_size = int(os.environ['CHARMI_CACHE_SIZE'])

        # Decoder settings
        if 'CHARMI_GAP' in os.environ:
            config.decoder.default_gap = os.environ['CHARMI_GAP']

        # Rendering settings
        if 'CHARMI_COLOR_SUPPORT' in os.environ:
            config.render.color_support = ColorSupportLevel(
                os.environ['CHARMI_COLOR_SUPPORT'].lower())
        elif os.environ.get('NO_COLOR'):
            config.render.color_support = ColorSupportLevel.PLAIN

        # Preview settings
        if 'CHARMI_CELL_WIDTH' in os.environ:
            config.preview.cell_width = int(os.environ['CHARMI_CELL_WIDTH'])
        if 'CHARMI_CELL_HEIGHT' in os.environ:
            config.preview.cell_height = int(os.environ['CHARMI_CELL_HEIGHT'])
        if 'CHARMI_FPS' in os.environ:
            config.preview.fps = int(os.environ['CHARMI_FPS'])

        # Debug mode and logging
        if 'CHARMI_DEBUG' in os.environ:
            config.debug_mode = os.environ['CHARMI_DEBUG'].lower() in ('true', '1', 'yes')
        if 'CHARMI_LOG_LEVEL' in os.environ:
            config.log_level = os.environ['CHARMI_LOG_LEVEL'].upper()

    @property
    def config(self) -> CharmiSystemConfig:
        """Get current configuration"""
        with self._config_lock:
            return self._config

    def reload(self, new_config: Optional[CharmiSystemConfig] = None) -> bool:
        """
        Reload configuration and notify callbacks.

        Args:
            new_config: New configuration to apply (reloads from env if None)

        Returns:
            True if reload successful
        """
        with self._config_lock:
            old_config = self._config

            try:
                if new_config is None:
                    new_config = CharmiSystemConfig()
                    self._load_environment_overrides(new_config)
                new_config.validate()
            except ValueError as e:
                logger.warning(f"Configuration reload failed: {e}")
                return False

            self._config = new_config
            self._notify_callbacks(old_config, new_config)
            logger.info("Configuration reloaded successfully")
            return True

    def register_callback(self, callback: Callable[[CharmiSystemConfig, CharmiSystemConfig], None]):
        """
        Register callback for configuration changes.

        Args:
            callback: Function called with (old_config, new_config)
        """
        self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable):
        """Remove a registered callback"""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self, old_config: CharmiSystemConfig, new_config: CharmiSystemConfig):
        """Notify all registered callbacks of configuration change"""
        for callback in list(self._callbacks):
            try:
                callback(old_config, new_config)
            except Exception as e:
                logger.error(f"Callback notification failed: {e}")


# ============================================================================
# PUBLIC API FUNCTIONS
# ============================================================================

_manager = ConfigurationManager()

def get_config() -> CharmiSystemConfig:
    """Get current system configuration"""
    return _manager.config

def reload_config(new_config: Optional[CharmiSystemConfig] = None) -> bool:
    """Reload system configuration"""
    return _manager.reload(new_config)

def register_config_callback(callback: Callable[[CharmiSystemConfig, CharmiSystemConfig], None]):
    """Register for configuration change notifications"""
    _manager.register_callback(callback)

def unregister_config_callback(callback: Callable):
    """Unregister a configuration change callback"""
    _manager.unregister_callback(callback)

def get_cache_config() -> CacheConfig:
    """Get cache configuration"""
    return _manager.config.cache

def get_decoder_config() -> DecoderConfig:
    """Get decoder configuration"""
    return _manager.config.decoder

def get_render_config() -> RenderConfig:
    """Get rendering configuration"""
    return _manager.config.render

def get_preview_config() -> PreviewConfig:
    """Get preview configuration"""
    return _manager.config.preview

# ============================================================================
# SYSTEM COLORS (xterm defaults)
# ============================================================================

ANSI_16_COLORS: Dict[int, Dict[str, Any]] = {
    # Dark half (0-7)
    0: {'name': 'black', 'rgb': (0, 0, 0)},
    1: {'name': 'dark red', 'rgb': (205, 0, 0)},
    2: {'name': 'dark green', 'rgb': (0, 205, 0)},
    3: {'name': 'dark yellow', 'rgb': (205, 205, 0)},
    4: {'name': 'dark blue', 'rgb': (0, 0, 238)},
    5: {'name': 'dark magenta', 'rgb': (205, 0, 205)},
    6: {'name': 'dark cyan', 'rgb': (0, 205, 205)},
    7: {'name': 'grey', 'rgb': (229, 229, 229)},

    # Bright half (8-15)
    8: {'name': 'dark grey', 'rgb': (127, 127, 127)},
    9: {'name': 'red', 'rgb': (255, 0, 0)},
    10: {'name': 'green', 'rgb': (0, 255, 0)},
    11: {'name': 'yellow', 'rgb': (255, 255, 0)},
    12: {'name': 'blue', 'rgb': (92, 92, 255)},
    13: {'name': 'magenta', 'rgb': (255, 0, 255)},
    14: {'name': 'cyan', 'rgb': (0, 255, 255)},
    15: {'name': 'white', 'rgb': (255, 255, 255)},
}

# Channel levels of the xterm 6x6x6 color cube (indices 16-231)
ANSI_CUBE_LEVELS: Tuple[int, ...] = (0, 95, 135, 175, 215, 255)
