"""
Label template model, validation and catalog loading.
"""

# Standard Library
import dataclasses
import json
import pathlib

# local repo modules
import pos_label_engine as ple
import pos_label_engine.config
import pos_label_engine.errors


ValidationError = ple.errors.ValidationError

DEFAULT_BACKGROUND_COLOR = ple.config.DEFAULT_BACKGROUND_COLOR
DEFAULT_TEXT_COLOR = ple.config.DEFAULT_TEXT_COLOR
DEFAULT_FONT_SIZE = ple.config.DEFAULT_FONT_SIZE
DEFAULT_BARCODE_TYPE = ple.config.DEFAULT_BARCODE_TYPE

ELEMENT_KINDS = ("text", "barcode", "line", "rectangle")
TEXT_ALIGNMENTS = ("left", "center", "right")
FONT_WEIGHTS = ("normal", "bold")
CATALOG_PATH = pathlib.Path(__file__).with_name("templates.json")


@dataclasses.dataclass(frozen=True)
class LabelElement:
	kind: str
	x: float
	y: float
	width: float
	height: float
	id: str = ""
	content: str | None = None
	data_field: str | None = None
	append_custom_text: bool = False
	font_size: float = DEFAULT_FONT_SIZE
	font_weight: str = "normal"
	text_align: str = "left"
	color: str = DEFAULT_TEXT_COLOR
	barcode_type: str = DEFAULT_BARCODE_TYPE
	stroke_width: float = 1.0
	fill_color: str | None = None


@dataclasses.dataclass(frozen=True)
class LabelTemplate:
	id: str
	name: str
	width: float
	height: float
	elements: tuple[LabelElement, ...] = ()
	background_color: str = DEFAULT_BACKGROUND_COLOR
	border_width: float = 0.0
	border_color: str | None = None
	description: str = ""


@dataclasses.dataclass(frozen=True)
class PrintJob:
	selected_product_ids: frozenset
	template_id: str
	copies_per_product: int = 1
	custom_text: str = ""


#============================================
def parse_hex_color(value: str | None) -> tuple[int, int, int]:
	"""
	Parse a hex color string into RGB integers.

	Args:
		value: Color string like "#AABBCC" or "#ABC".

	Returns:
		Tuple of (r, g, b) in 0-255 range, black when malformed.
	"""
	if not value or not value.startswith("#"):
		return (0, 0, 0)
	digits = value[1:]
	if len(digits) == 3:
		digits = "".join(char * 2 for char in digits)
	if len(digits) != 6:
		return (0, 0, 0)
	try:
		red = int(digits[0:2], 16)
		green = int(digits[2:4], 16)
		blue = int(digits[4:6], 16)
	except ValueError:
		return (0, 0, 0)
	return (red, green, blue)


#============================================
def validate_template(template: LabelTemplate) -> LabelTemplate:
	"""
	Check template and element geometry.

	Args:
		template: Template to check.

	Returns:
		The same template, for chaining.
	"""
	if template.width <= 0:
		raise ValidationError("width", f"must be > 0, got {template.width}")
	if template.height <= 0:
		raise ValidationError("height", f"must be > 0, got {template.height}")
	if template.border_width < 0:
		raise ValidationError("border_width", f"must be >= 0, got {template.border_width}")
	for index, element in enumerate(template.elements):
		prefix = f"elements[{index}]"
		if element.kind not in ELEMENT_KINDS:
			raise ValidationError(f"{prefix}.kind", f"unknown element kind {element.kind!r}")
		if element.width <= 0:
			raise ValidationError(f"{prefix}.width", f"must be > 0, got {element.width}")
		if element.height <= 0:
			raise ValidationError(f"{prefix}.height", f"must be > 0, got {element.height}")
	return template


#============================================
def validate_print_job(job: PrintJob) -> PrintJob:
	"""
	Check print job options.

	Args:
		job: Print job to check.

	Returns:
		The same job, for chaining.
	"""
	copies = job.copies_per_product
	if isinstance(copies, bool) or not isinstance(copies, int) or copies < 1:
		raise ValidationError("copies_per_product", f"must be an integer >= 1, got {copies!r}")
	return job


#============================================
def element_from_dict(data: dict) -> LabelElement:
	"""
	Build a LabelElement from its JSON representation.

	Both the camelCase keys of the web designer and snake_case keys
	are accepted.

	Args:
		data: Element mapping.

	Returns:
		LabelElement.
	"""
	def pick(*keys, default=None):
		for key in keys:
			if key in data and data[key] is not None:
				return data[key]
		return default

	kind = str(pick("kind", "type", default="text")).lower()
	if kind == "rect":
		kind = "rectangle"
	if kind not in ELEMENT_KINDS:
		raise ValidationError("kind", f"unknown element kind {kind!r}")
	font_weight = str(pick("font_weight", "fontWeight", default="normal")).lower()
	if font_weight not in FONT_WEIGHTS:
		font_weight = "bold" if font_weight.isdigit() and int(font_weight) >= 700 else "normal"
	text_align = str(pick("text_align", "textAlign", default="left")).lower()
	if text_align not in TEXT_ALIGNMENTS:
		text_align = "left"
	try:
		element = LabelElement(
			kind=kind,
			x=float(pick("x", default=0.0)),
			y=float(pick("y", default=0.0)),
			width=float(pick("width", default=0.0)),
			height=float(pick("height", default=0.0)),
			id=str(pick("id", default="")),
			content=pick("content"),
			data_field=pick("data_field", "dataField"),
			append_custom_text=bool(pick("append_custom_text", "appendCustomText", default=False)),
			font_size=float(pick("font_size", "fontSize", default=DEFAULT_FONT_SIZE)),
			font_weight=font_weight,
			text_align=text_align,
			color=str(pick("color", default=DEFAULT_TEXT_COLOR)),
			barcode_type=str(pick("barcode_type", "barcodeType", default=DEFAULT_BARCODE_TYPE)),
			stroke_width=float(pick("stroke_width", "strokeWidth", default=1.0)),
			fill_color=pick("fill_color", "fillColor"),
		)
	except (TypeError, ValueError) as error:
		raise ValidationError("element", str(error)) from error
	return element


#============================================
def template_from_dict(data: dict) -> LabelTemplate:
	"""
	Build and validate a LabelTemplate from its JSON representation.

	Args:
		data: Template mapping.

	Returns:
		Validated LabelTemplate.
	"""
	elements = tuple(element_from_dict(entry) for entry in data.get("elements") or [])
	try:
		template = LabelTemplate(
			id=str(data.get("id", "")),
			name=str(data.get("name", "")),
			width=float(data.get("width", 0.0)),
			height=float(data.get("height", 0.0)),
			elements=elements,
			background_color=data.get("backgroundColor") or data.get("background_color") or DEFAULT_BACKGROUND_COLOR,
			border_width=float(data.get("borderWidth", data.get("border_width", 0.0))),
			border_color=data.get("borderColor") or data.get("border_color"),
			description=str(data.get("description", "")),
		)
	except (TypeError, ValueError) as error:
		raise ValidationError("template", str(error)) from error
	return validate_template(template)


#============================================
def load_template_catalog(
	path: pathlib.Path | None = None,
	include_builtin: bool = True,
) -> list[LabelTemplate]:
	"""
	Load label templates from a JSON catalog.

	Args:
		path: Optional extra catalog file, merged after the built-ins.
		include_builtin: Whether to include the shipped catalog.

	Returns:
		List of validated templates. Later entries replace earlier ones
		with the same id.
	"""
	sources: list[pathlib.Path] = []
	if include_builtin:
		sources.append(CATALOG_PATH)
	if path is not None:
		sources.append(pathlib.Path(path))

	by_id: dict[str, LabelTemplate] = {}
	for source in sources:
		with source.open("r", encoding="utf-8") as handle:
			try:
				payload = json.load(handle)
			except json.JSONDecodeError as error:
				raise ValidationError("templates", f"{source}: {error}") from error
		if isinstance(payload, dict):
			payload = payload.get("templates", [])
		for entry in payload:
			template = template_from_dict(entry)
			by_id[template.id] = template
	return list(by_id.values())


#============================================
def find_template(catalog: list[LabelTemplate], template_id: str) -> LabelTemplate:
	"""
	Look up a template by id.

	Args:
		catalog: Loaded templates.
		template_id: Template id.

	Returns:
		Matching template.
	"""
	for template in catalog:
		if template.id == template_id:
			return template
	raise ValidationError("template_id", f"unknown template {template_id!r}")
