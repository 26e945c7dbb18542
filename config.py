"""
Matrix Viewer - Configuration Module
====================================
Centralized constants for the matrix visualization and export engine:
data types, colour themes, scaling thresholds and page geometry.
"""

# --- 1. DATA TYPES ---
# Each entry: id -> display name, description, pivot API endpoint.
# The category endpoint differs from its id.
DATA_TYPES = {
    "symptom": {
        "name": "Symptoms",
        "description": "Patient symptoms extracted from clinical notes.",
        "endpoint": "symptom",
    },
    "diagnosis": {
        "name": "Diagnoses",
        "description": "Diagnosed conditions identified in clinical documentation.",
        "endpoint": "diagnosis",
    },
    "category": {
        "name": "Diagnostic Categories",
        "description": "Broader diagnostic classifications of conditions.",
        "endpoint": "diagnostic-category",
    },
    "hrsn": {
        "name": "HRSN Indicators",
        "description": "Health-related social needs affecting patient health.",
        "endpoint": "hrsn",
    },
}

DATA_TYPE_ORDER = ["symptom", "diagnosis", "category", "hrsn"]

# --- 2. COLOUR THEMES ---
# Only the five bucket colours differ between themes. Bucket assignment
# never depends on the theme.
COLOR_THEMES = {
    "iridis": {
        "name": "Iridis (Purple-Blue)",
        "HIGHEST": "#6A0DAD",
        "HIGH": "#9370DB",
        "MEDIUM": "#B19CD9",
        "LOW": "#CCCCFF",
        "LOWEST": "#F8F8FF",
    },
    "viridis": {
        "name": "Viridis (Colorblind-friendly)",
        "HIGHEST": "#440154",
        "HIGH": "#31688E",
        "MEDIUM": "#35B779",
        "LOW": "#90D743",
        "LOWEST": "#FDE725",
    },
    "redBlue": {
        "name": "Red-Blue",
        "HIGHEST": "#9E0142",
        "HIGH": "#F46D43",
        "MEDIUM": "#FFFFFF",
        "LOW": "#74ADD1",
        "LOWEST": "#313695",
    },
    "grayscale": {
        "name": "Grayscale",
        "HIGHEST": "#000000",
        "HIGH": "#444444",
        "MEDIUM": "#777777",
        "LOW": "#BBBBBB",
        "LOWEST": "#EEEEEE",
    },
}

DEFAULT_THEME = "iridis"

# Zero cells are never painted with a bucket colour
EMPTY_COLOR = "#FFFFFF"

# --- 3. SCALING ---
# (minimum score, bucket name), checked top-down, first match wins
BUCKET_THRESHOLDS = [
    (0.80, "HIGHEST"),
    (0.60, "HIGH"),
    (0.40, "MEDIUM"),
    (0.20, "LOW"),
]

COMPRESSION_MODES = ("auto", "log", "linear")
DEFAULT_COMPRESSION = "auto"

# In "auto" mode the maximum counts as an outlier when it is at least this
# many times the next-largest distinct count.
OUTLIER_RATIO = 3.0

# Bubble radius in screen pixels: min + k * ln(1 + value), clamped
BUBBLE_MIN_SIZE = 5.0
BUBBLE_MAX_SIZE = 23.0
BUBBLE_SIZE_K = 6.0

# --- 4. VIEWS ---
# Compact dashboard cards only show the top rows
COMPACT_ROW_LIMIT = 8

NO_DATA_MESSAGE = "No data available"

# --- 5. PAGE GEOMETRY (pixels at LAYOUT_DPI) ---
LAYOUT_DPI = 100

# Landscape US letter
DOCUMENT_PAGE_SIZE_IN = (11.0, 8.5)

PAGE_MARGIN_PX = 40
PAGE_HEADER_PX = 90
PAGE_FOOTER_PX = 30
COLUMN_HEADER_PX = 60
ROW_LABEL_PX = 240

ROW_HEIGHT_PX = 22
COLUMN_WIDTH_PX = 56

# Default image supersampling relative to the screen density
DEFAULT_IMAGE_SCALE = 2.0
# Agg refuses very large canvases
MAX_IMAGE_PX = 16000

# --- 6. EXPORT ---
SHEET_NAME_MAX_LEN = 31
SHEET_NAME_ILLEGAL_CHARS = '[]:*?/\\'

# Chart kinds drawn by image and document export
CHART_KINDS = ("heatmap", "bubble")
DEFAULT_CHART = "heatmap"

# Batch export formats, in ZIP folder order
EXPORT_FORMATS = ("xlsx", "pdf", "png")

# Grid and text colours used on exported pages
GRID_COLOR = "#DDDDDD"
HEADER_TEXT_COLOR = "#2C3E50"
MUTED_TEXT_COLOR = "#7F8C8D"
