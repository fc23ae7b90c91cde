"""
Label rendering onto raster sheets.
"""

# Standard Library
import dataclasses
import functools

# PIP3 modules
import PIL.Image
import PIL.ImageDraw
import PIL.ImageFont

# local repo modules
import pos_label_engine as ple
import pos_label_engine.barcodes
import pos_label_engine.config
import pos_label_engine.errors
import pos_label_engine.fields
import pos_label_engine.grid
import pos_label_engine.products
import pos_label_engine.template


EngineConfig = ple.config.EngineConfig
BarcodeRenderError = ple.errors.BarcodeRenderError
ValidationError = ple.errors.ValidationError
LabelCell = ple.grid.LabelCell
GridLayout = ple.grid.GridLayout
Product = ple.products.Product
LabelElement = ple.template.LabelElement
LabelTemplate = ple.template.LabelTemplate
PrintJob = ple.template.PrintJob

mm_to_pixels = ple.config.mm_to_pixels
parse_hex_color = ple.template.parse_hex_color

SHEET_BACKGROUND_COLOR = ple.config.SHEET_BACKGROUND_COLOR
PLACEHOLDER_BACKGROUND_COLOR = ple.config.PLACEHOLDER_BACKGROUND_COLOR
PLACEHOLDER_TEXT_COLOR = ple.config.PLACEHOLDER_TEXT_COLOR
PLACEHOLDER_TEXT = ple.config.PLACEHOLDER_TEXT
PLACEHOLDER_FONT_SIZE = ple.config.PLACEHOLDER_FONT_SIZE
BARCODE_FALLBACK_FILL = ple.config.BARCODE_FALLBACK_FILL
BARCODE_FALLBACK_FONT_SIZE = ple.config.BARCODE_FALLBACK_FONT_SIZE
CUSTOM_TEXT_FONT_SIZE = ple.config.CUSTOM_TEXT_FONT_SIZE
DEFAULT_TEXT_COLOR = ple.config.DEFAULT_TEXT_COLOR

RGB = tuple[int, int, int]


@dataclasses.dataclass(frozen=True)
class DrawStyle:
	fill: RGB | None = None
	stroke: RGB | None = None
	stroke_width: int = 1
	font: PIL.ImageFont.FreeTypeFont | None = None
	align: str = "left"


@dataclasses.dataclass
class RenderStats:
	labels: int = 0
	barcode_fallbacks: int = 0
	overflow_elements: int = 0
	fallback_messages: list[str] = dataclasses.field(default_factory=list)

	def add(self, other: "RenderStats") -> None:
		self.labels += other.labels
		self.barcode_fallbacks += other.barcode_fallbacks
		self.overflow_elements += other.overflow_elements
		self.fallback_messages.extend(other.fallback_messages)


@dataclasses.dataclass
class SheetResult:
	image: PIL.Image.Image
	layout: GridLayout | None
	stats: RenderStats
	label_count: int


#============================================
@functools.lru_cache(maxsize=64)
def load_font(font_path: str, size: int) -> PIL.ImageFont.FreeTypeFont:
	"""
	Load a TrueType font, falling back to Pillow's bundled font.

	Args:
		font_path: Font file name or path.
		size: Pixel size.

	Returns:
		Font object.
	"""
	size = max(1, int(size))
	try:
		return PIL.ImageFont.truetype(font_path, size)
	except OSError:
		return PIL.ImageFont.load_default(size=size)


#============================================
def font_for_element(element: LabelElement, config: EngineConfig, scale: float) -> PIL.ImageFont.FreeTypeFont:
	"""
	Pick the font for a text element.

	Args:
		element: Text element.
		config: Engine configuration.
		scale: Pixel scale factor.

	Returns:
		Font object.
	"""
	font_path = config.font_bold if element.font_weight == "bold" else config.font_regular
	return load_font(font_path, round(element.font_size * scale))


#============================================
def make_measure(font: PIL.ImageFont.FreeTypeFont):
	"""
	Build a width function for a font.

	Args:
		font: Font object.

	Returns:
		Callable mapping a string to its pixel width.
	"""
	def measure(text: str) -> float:
		return font.getlength(text)
	return measure


#============================================
def compute_align_offset(available: float, used: float, align: str) -> float:
	"""
	Compute an alignment offset.

	Args:
		available: Available dimension.
		used: Dimension of the content.
		align: Alignment string.

	Returns:
		Offset in pixels.
	"""
	normalized = align.strip().lower()
	if normalized == "left":
		return 0.0
	if normalized == "right":
		return available - used
	return (available - used) / 2.0


#============================================
def draw_rect(
	draw: PIL.ImageDraw.ImageDraw,
	box: tuple[float, float, float, float],
	style: DrawStyle,
) -> None:
	"""
	Draw a rectangle with optional fill and outline.

	Args:
		draw: Pillow draw handle.
		box: (x0, y0, x1, y1) in pixels.
		style: Draw style.
	"""
	outline = style.stroke if style.stroke_width > 0 else None
	draw.rectangle(box, fill=style.fill, outline=outline, width=max(0, style.stroke_width))


#============================================
def draw_line(
	draw: PIL.ImageDraw.ImageDraw,
	x: float,
	y: float,
	width: float,
	height: float,
	style: DrawStyle,
) -> None:
	"""
	Draw a straight rule along the long axis of a box.

	Args:
		draw: Pillow draw handle.
		x: Box left in pixels.
		y: Box top in pixels.
		width: Box width in pixels.
		height: Box height in pixels.
		style: Draw style.
	"""
	if width >= height:
		center_y = y + height / 2.0
		points = [(x, center_y), (x + width, center_y)]
	else:
		center_x = x + width / 2.0
		points = [(center_x, y), (center_x, y + height)]
	draw.line(points, fill=style.stroke, width=max(1, style.stroke_width))


#============================================
def draw_text_lines(
	draw: PIL.ImageDraw.ImageDraw,
	x: float,
	y: float,
	width: float,
	lines: list[str],
	style: DrawStyle,
	line_step: float,
	inset: float,
) -> None:
	"""
	Draw wrapped lines top to bottom inside an element box.

	Args:
		draw: Pillow draw handle.
		x: Box left in pixels.
		y: Box top in pixels.
		width: Box width in pixels.
		lines: Lines to draw.
		style: Draw style carrying font, fill and alignment.
		line_step: Distance between line tops.
		inset: Inner padding of the box.
	"""
	available = width - 2.0 * inset
	for index, line in enumerate(lines):
		line_width = style.font.getlength(line)
		offset = compute_align_offset(available, line_width, style.align)
		text_x = x + inset + offset
		text_y = y + inset + index * line_step
		draw.text((text_x, text_y), line, font=style.font, fill=style.fill)


#============================================
def draw_barcode_fallback(
	draw: PIL.ImageDraw.ImageDraw,
	box: tuple[float, float, float, float],
	text: str,
	config: EngineConfig,
	scale: float,
) -> None:
	"""
	Draw the raw barcode data in place of an image.

	Args:
		draw: Pillow draw handle.
		box: (x0, y0, x1, y1) in pixels.
		text: Raw data string.
		config: Engine configuration.
		scale: Pixel scale factor.
	"""
	draw_rect(draw, box, DrawStyle(fill=parse_hex_color(BARCODE_FALLBACK_FILL), stroke_width=0))
	font = load_font(config.font_mono, round(BARCODE_FALLBACK_FONT_SIZE * scale))
	center = ((box[0] + box[2]) / 2.0, (box[1] + box[3]) / 2.0)
	draw.text(center, text, font=font, fill=parse_hex_color(DEFAULT_TEXT_COLOR), anchor="mm")


#============================================
def draw_barcode_element(
	surface: PIL.Image.Image,
	draw: PIL.ImageDraw.ImageDraw,
	element: LabelElement,
	product: Product,
	x: float,
	y: float,
	width: float,
	height: float,
	config: EngineConfig,
	scale: float,
	stats: RenderStats,
) -> None:
	"""
	Draw a barcode element, degrading to text when encoding fails.

	Args:
		surface: Sheet image.
		draw: Pillow draw handle on the sheet.
		element: Barcode element.
		product: Product record.
		x: Box left in pixels.
		y: Box top in pixels.
		width: Box width in pixels.
		height: Box height in pixels.
		config: Engine configuration.
		scale: Pixel scale factor.
		stats: Counters updated in place.
	"""
	data = ple.fields.resolve_barcode_data(element, product, config)
	box_width = max(1, int(round(width)))
	box_height = max(1, int(round(height)))
	try:
		image = ple.barcodes.generate_barcode(data, element.barcode_type)
	except BarcodeRenderError as error:
		stats.barcode_fallbacks += 1
		stats.fallback_messages.append(f"Barcode fallback for product {product.id}: {error}")
		draw_barcode_fallback(draw, (x, y, x + width, y + height), data, config, scale)
		return

	paste_x = int(round(x))
	paste_y = int(round(y))
	if ple.barcodes.is_square_symbology(element.barcode_type):
		side = min(box_width, box_height)
		paste_x += (box_width - side) // 2
		paste_y += (box_height - side) // 2
		box_width = side
		box_height = side
	resized = image.resize((box_width, box_height), PIL.Image.Resampling.LANCZOS)
	surface.paste(resized, (paste_x, paste_y))


#============================================
def element_overflows(element: LabelElement, template: LabelTemplate) -> bool:
	"""
	Check whether an element extends past the label edge.

	Args:
		element: Label element.
		template: Owning template.

	Returns:
		True when any edge lies outside the label.
	"""
	if element.x < 0 or element.y < 0:
		return True
	return element.x + element.width > template.width or element.y + element.height > template.height


#============================================
def render_label(
	surface: PIL.Image.Image,
	cell: LabelCell,
	product: Product,
	template: LabelTemplate,
	custom_text: str = "",
	config: EngineConfig | None = None,
	scale: float = 1.0,
) -> RenderStats:
	"""
	Paint one label at its cell origin.

	Args:
		surface: Sheet image, the only thing mutated.
		cell: Cell with the pixel origin.
		product: Product record.
		template: Validated label template.
		custom_text: Job-level custom text.
		config: Engine configuration.
		scale: Pixel scale factor.

	Returns:
		RenderStats for this label.
	"""
	if config is None:
		config = EngineConfig()
	stats = RenderStats(labels=1)
	draw = PIL.ImageDraw.Draw(surface)

	def to_px(value: float) -> float:
		return mm_to_pixels(value, config.dpi) * scale

	label_width = to_px(template.width)
	label_height = to_px(template.height)
	label_box = (cell.x, cell.y, cell.x + label_width, cell.y + label_height)

	draw_rect(draw, label_box, DrawStyle(fill=parse_hex_color(template.background_color), stroke_width=0))
	if template.border_width > 0:
		border_style = DrawStyle(
			stroke=parse_hex_color(template.border_color or config.border_color),
			stroke_width=max(1, int(round(template.border_width * scale))),
		)
		draw_rect(draw, label_box, border_style)

	inset = config.text_inset * scale
	for element in template.elements:
		if element_overflows(element, template):
			stats.overflow_elements += 1
		element_x = cell.x + to_px(element.x)
		element_y = cell.y + to_px(element.y)
		element_width = to_px(element.width)
		element_height = to_px(element.height)

		if element.kind == "text":
			font = font_for_element(element, config, scale)
			lines = ple.fields.layout_text(
				element,
				product,
				custom_text,
				make_measure(font),
				config,
				scale,
			)
			text_style = DrawStyle(fill=parse_hex_color(element.color), font=font, align=element.text_align)
			line_step = element.font_size * scale * config.line_height
			draw_text_lines(draw, element_x, element_y, element_width, lines, text_style, line_step, inset)
			continue
		if element.kind == "barcode":
			draw_barcode_element(
				surface,
				draw,
				element,
				product,
				element_x,
				element_y,
				element_width,
				element_height,
				config,
				scale,
				stats,
			)
			continue
		if element.kind == "line":
			line_style = DrawStyle(
				stroke=parse_hex_color(element.color),
				stroke_width=max(1, int(round(element.stroke_width * scale))),
			)
			draw_line(draw, element_x, element_y, element_width, element_height, line_style)
			continue
		if element.kind == "rectangle":
			fill = parse_hex_color(element.fill_color) if element.fill_color else None
			rect_style = DrawStyle(
				fill=fill,
				stroke=parse_hex_color(element.color),
				stroke_width=int(round(element.stroke_width * scale)),
			)
			draw_rect(
				draw,
				(element_x, element_y, element_x + element_width, element_y + element_height),
				rect_style,
			)
			continue

	if custom_text and custom_text.strip() and not ple.fields.template_uses_custom_text(template):
		font = load_font(config.font_regular, round(CUSTOM_TEXT_FONT_SIZE * scale))
		footer_style = DrawStyle(fill=parse_hex_color(DEFAULT_TEXT_COLOR), font=font, align="center")
		footer_y = cell.y + label_height - inset - CUSTOM_TEXT_FONT_SIZE * scale * config.line_height
		draw_text_lines(draw, cell.x, footer_y, label_width, [custom_text.strip()], footer_style, 0.0, 0.0)
	return stats


#============================================
def create_surface(width: float, height: float) -> PIL.Image.Image:
	"""
	Allocate a white sheet image.

	Args:
		width: Width in pixels.
		height: Height in pixels.

	Returns:
		RGB image.
	"""
	size = (max(1, int(round(width))), max(1, int(round(height))))
	return PIL.Image.new("RGB", size, parse_hex_color(SHEET_BACKGROUND_COLOR))


#============================================
def allocate_surface(width: float, height: float, config: EngineConfig) -> PIL.Image.Image:
	"""
	Allocate a preview sheet, refusing sizes above the pixel cap.

	Args:
		width: Width in pixels.
		height: Height in pixels.
		config: Engine configuration.

	Returns:
		RGB image.
	"""
	pixel_width = int(round(width))
	pixel_height = int(round(height))
	if pixel_width * pixel_height > config.max_surface_pixels:
		raise ValidationError(
			"canvas",
			f"sheet {pixel_width}x{pixel_height} exceeds {config.max_surface_pixels} pixels, select fewer labels",
		)
	try:
		return create_surface(width, height)
	except MemoryError as error:
		raise ValidationError("canvas", f"cannot create sheet {pixel_width}x{pixel_height}") from error


#============================================
def render_placeholder(width: float, height: float, scale: float, config: EngineConfig) -> PIL.Image.Image:
	"""
	Render the empty-selection sheet.

	Args:
		width: Sheet width in pixels.
		height: Sheet height in pixels.
		scale: Pixel scale factor.
		config: Engine configuration.

	Returns:
		RGB image with a centered hint message.
	"""
	image = create_surface(width, height)
	draw = PIL.ImageDraw.Draw(image)
	draw_rect(draw, (0, 0, image.width, image.height), DrawStyle(fill=parse_hex_color(PLACEHOLDER_BACKGROUND_COLOR), stroke_width=0))
	font = load_font(config.font_bold, round(PLACEHOLDER_FONT_SIZE * scale))
	center = (image.width / 2.0, image.height / 2.0)
	draw.text(center, PLACEHOLDER_TEXT, font=font, fill=parse_hex_color(PLACEHOLDER_TEXT_COLOR), anchor="mm")
	return image


#============================================
def plan_sheet(
	products: list[Product],
	template: LabelTemplate,
	job: PrintJob,
	config: EngineConfig,
	scale: float,
) -> tuple[GridLayout, list[LabelCell]]:
	"""
	Validate inputs and compute the scaled sheet layout.

	Args:
		products: Product source; only selected ids are used.
		template: Label template.
		job: Print job.
		config: Engine configuration.
		scale: Pixel scale factor.

	Returns:
		Tuple of (layout, cells). Cells are empty for an empty selection.
	"""
	ple.template.validate_template(template)
	ple.template.validate_print_job(job)
	selected = ple.products.select_products(products, job.selected_product_ids)
	instances = ple.grid.expand_instances(selected, job.copies_per_product)
	layout = ple.grid.pack_grid(
		len(instances),
		mm_to_pixels(template.width, config.dpi) * scale,
		mm_to_pixels(template.height, config.dpi) * scale,
		config.canvas_width * scale,
		config.padding * scale,
		config.min_canvas_height * scale,
	)
	cells = ple.grid.build_cells(layout, instances)
	return (layout, cells)


#============================================
def render_cells(
	surface: PIL.Image.Image,
	cells: list[LabelCell],
	template: LabelTemplate,
	custom_text: str,
	config: EngineConfig,
	scale: float,
) -> RenderStats:
	"""
	Render every cell onto a sheet.

	Args:
		surface: Sheet image.
		cells: Cells from plan_sheet.
		template: Label template.
		custom_text: Job-level custom text.
		config: Engine configuration.
		scale: Pixel scale factor.

	Returns:
		Combined RenderStats.
	"""
	stats = RenderStats()
	for cell in cells:
		stats.add(render_label(surface, cell, cell.product, template, custom_text, config, scale))
	return stats


#============================================
def render_preview(
	products: list[Product],
	template: LabelTemplate,
	job: PrintJob,
	config: EngineConfig | None = None,
) -> SheetResult:
	"""
	Render the screen preview sheet.

	Args:
		products: Product source; only selected ids are used.
		template: Label template.
		job: Print job.
		config: Engine configuration.

	Returns:
		SheetResult with the preview image.
	"""
	if config is None:
		config = EngineConfig()
	layout, cells = plan_sheet(products, template, job, config, 1.0)
	if not cells:
		image = render_placeholder(config.canvas_width, config.min_canvas_height, 1.0, config)
		return SheetResult(image=image, layout=None, stats=RenderStats(), label_count=0)
	surface = allocate_surface(layout.canvas_width, layout.canvas_height, config)
	stats = render_cells(surface, cells, template, job.custom_text, config, 1.0)
	return SheetResult(image=surface, layout=layout, stats=stats, label_count=len(cells))
