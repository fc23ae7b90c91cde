"""
Shared configuration and constants.
"""

import dataclasses


MM_PER_INCH = 25.4
DEFAULT_DPI = 96.0

PREVIEW_CANVAS_WIDTH = 800.0
PREVIEW_MIN_CANVAS_HEIGHT = 500.0
DEFAULT_PADDING = 10.0
DEFAULT_TEXT_INSET = 4.0
DEFAULT_LINE_HEIGHT = 1.2
DEFAULT_PRINT_SCALE = 2.0
DEFAULT_PRINT_PAGE_MARGIN = 20.0
MAX_SURFACE_PIXELS = 120_000_000

DEFAULT_BACKGROUND_COLOR = "#ffffff"
DEFAULT_BORDER_COLOR = "#333333"
DEFAULT_TEXT_COLOR = "#000000"
SHEET_BACKGROUND_COLOR = "#ffffff"
PLACEHOLDER_BACKGROUND_COLOR = "#f8f9fa"
PLACEHOLDER_TEXT_COLOR = "#6c757d"
PLACEHOLDER_TEXT = "Select products to preview labels"
PLACEHOLDER_FONT_SIZE = 18.0
BARCODE_FALLBACK_FILL = "#f0f0f0"
BARCODE_FALLBACK_FONT_SIZE = 8.0
CUSTOM_TEXT_FONT_SIZE = 8.0

DEFAULT_FONT_REGULAR = "DejaVuSans.ttf"
DEFAULT_FONT_BOLD = "DejaVuSans-Bold.ttf"
DEFAULT_FONT_MONO = "DejaVuSansMono.ttf"
DEFAULT_FONT_SIZE = 12.0

DEFAULT_CURRENCY_SYMBOL = "₹"
DEFAULT_CURRENCY_DECIMALS = 2
DEFAULT_WEIGHT_UNIT = "kg"
MRP_PREFIX = "MRP: "
DEFAULT_BARCODE_TYPE = "CODE128"


@dataclasses.dataclass(frozen=True)
class EngineConfig:
	dpi: float = DEFAULT_DPI
	canvas_width: float = PREVIEW_CANVAS_WIDTH
	min_canvas_height: float = PREVIEW_MIN_CANVAS_HEIGHT
	padding: float = DEFAULT_PADDING
	text_inset: float = DEFAULT_TEXT_INSET
	line_height: float = DEFAULT_LINE_HEIGHT
	border_color: str = DEFAULT_BORDER_COLOR
	font_regular: str = DEFAULT_FONT_REGULAR
	font_bold: str = DEFAULT_FONT_BOLD
	font_mono: str = DEFAULT_FONT_MONO
	currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
	currency_decimals: int = DEFAULT_CURRENCY_DECIMALS
	default_weight_unit: str = DEFAULT_WEIGHT_UNIT
	print_scale: float = DEFAULT_PRINT_SCALE
	print_page_margin: float = DEFAULT_PRINT_PAGE_MARGIN
	max_surface_pixels: int = MAX_SURFACE_PIXELS


#============================================
def mm_to_pixels(mm: float, dpi: float = DEFAULT_DPI) -> float:
	"""
	Convert millimeters to pixels.

	Args:
		mm: Millimeter value.
		dpi: Dots per inch of the target surface.

	Returns:
		Pixel value.
	"""
	return mm * dpi / MM_PER_INCH
