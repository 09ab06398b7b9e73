# src/sitesmith/constants.py
"""
Central constants used across the project.
"""

# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"
DEFAULT_ENV_BUILD_ENV: str = "NODE_ENV"
DEFAULT_ENV_WATCH_INTERVAL: str = "WATCH_INTERVAL"

# --- config defaults ---
DEFAULT_STRICT_CONFIG: bool = False
DEFAULT_ENVIRONMENT: str = "development"
DEFAULT_SRC_DIR: str = "src"
DEFAULT_DEST_DIR: str = "docs"
DEFAULT_LOG_LEVEL: str = "info"
DEFAULT_HOST: str = "localhost"
DEFAULT_PORT: int = 3000
DEFAULT_WATCH_INTERVAL: float = 1.0  # seconds

# --- html ---
DEFAULT_INCLUDE_PREFIX: str = "@@"
# authoring prefix used by pages two levels below src/, flattened in output
ASSET_PREFIX_AUTHORED: str = "../../assets"
ASSET_PREFIX_BUILT: str = "assets"

# --- bundle names ---
STYLE_BUNDLE: str = "style.min.css"
SASS_ENTRY: str = "bundle.scss"  # temporary compile entry in development
SCRIPT_BUNDLE: str = "script.min.js"
SCRIPT_SEPARATOR: str = ";"
SPRITE_FILENAME: str = "sprite.svg"

# --- css post-processing ---
REM_ROOT_VALUE: int = 16
REM_PRECISION: int = 5
REM_MIN_PIXEL_VALUE: float = 2

# --- image optimisation ---
JPEG_QUALITY: int = 75
JPEG_PROGRESSIVE: bool = False
GIF_INTERLACED: bool = True
PNG_COMPRESS_LEVEL: int = 9  # zlib scale, 0-9

# --- favicons ---
APPLE_ICON_SIZES: tuple[int, ...] = (57, 60, 72, 76, 114, 120, 144, 152, 167, 180)
FAVICON_SIZES: tuple[int, ...] = (16, 32, 48)
FAVICON_ICO_SIZES: tuple[int, ...] = (16, 24, 32, 48, 64)
APPLE_ICON_BACKGROUND: str = "#ffffff"
