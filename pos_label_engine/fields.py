"""
Data field resolution and text layout.
"""

# Standard Library
import decimal
import enum
import typing

# local repo modules
import pos_label_engine as ple
import pos_label_engine.config
import pos_label_engine.products
import pos_label_engine.template


EngineConfig = ple.config.EngineConfig
Product = ple.products.Product
LabelElement = ple.template.LabelElement
LabelTemplate = ple.template.LabelTemplate

MRP_PREFIX = ple.config.MRP_PREFIX
mm_to_pixels = ple.config.mm_to_pixels

MeasureFunc = typing.Callable[[str], float]


class DataField(enum.Enum):
	NAME = "name"
	PRICE = "price"
	MRP = "mrp"
	SKU = "sku"
	BARCODE = "barcode"
	CATEGORY = "category"
	WEIGHT = "weight"
	HSN = "hsn"
	CUSTOM_TEXT = "custom_text"


#============================================
def parse_data_field(name: str | None) -> DataField | None:
	"""
	Map a data field name to its enum member.

	Args:
		name: Field name from a template, e.g. "price".

	Returns:
		DataField, or None for a missing or unknown name.
	"""
	if not name:
		return None
	key = name.strip()
	if key == "customText":
		key = DataField.CUSTOM_TEXT.value
	try:
		return DataField(key.lower())
	except ValueError:
		return None


#============================================
def format_currency(amount: float, symbol: str, decimals: int) -> str:
	"""
	Format a currency amount with a fixed number of decimals.

	Args:
		amount: Numeric amount.
		symbol: Currency symbol prefix.
		decimals: Decimal places.

	Returns:
		Formatted string like "₹1,250.00".
	"""
	return f"{symbol}{float(amount):,.{decimals}f}"


#============================================
def format_number(value: float) -> str:
	"""
	Format a number in plain decimal notation without losing digits.

	Args:
		value: Numeric value.

	Returns:
		"500" for whole numbers, "12.345678" or "0.00001" otherwise.
	"""
	number = float(value)
	if number.is_integer():
		return str(int(number))
	# repr gives the shortest round-trip digits, Decimal drops the exponent
	return format(decimal.Decimal(repr(number)), "f")


#============================================
def format_weight(product: Product, default_unit: str) -> str:
	"""
	Format product weight with its unit.

	Args:
		product: Product record.
		default_unit: Unit used when the product has none.

	Returns:
		Weight string like "500g", or "" when weight is missing.
	"""
	if product.weight is None:
		return ""
	unit = product.weight_unit or default_unit
	return f"{format_number(product.weight)}{unit}"


def _resolve_price(product: Product, custom_text: str, config: EngineConfig) -> str:
	return format_currency(product.price, config.currency_symbol, config.currency_decimals)


def _resolve_mrp(product: Product, custom_text: str, config: EngineConfig) -> str:
	amount = product.mrp if product.mrp is not None else product.price
	value = format_currency(amount, config.currency_symbol, config.currency_decimals)
	return f"{MRP_PREFIX}{value}"


FIELD_RESOLVERS: dict[DataField, typing.Callable[[Product, str, EngineConfig], str]] = {
	DataField.NAME: lambda product, custom_text, config: product.name,
	DataField.PRICE: _resolve_price,
	DataField.MRP: _resolve_mrp,
	DataField.SKU: lambda product, custom_text, config: product.sku,
	DataField.BARCODE: lambda product, custom_text, config: product.barcode or product.sku,
	DataField.CATEGORY: lambda product, custom_text, config: product.category or "",
	DataField.WEIGHT: lambda product, custom_text, config: format_weight(product, config.default_weight_unit),
	DataField.HSN: lambda product, custom_text, config: product.hsn_code or "",
	DataField.CUSTOM_TEXT: lambda product, custom_text, config: custom_text or "",
}


#============================================
def resolve_field(
	name: str | None,
	product: Product,
	custom_text: str = "",
	config: EngineConfig | None = None,
) -> str:
	"""
	Resolve a data field name against a product.

	Args:
		name: Field name.
		product: Product record.
		custom_text: Job-level custom text.
		config: Engine configuration.

	Returns:
		Resolved string, "" for unknown fields.
	"""
	if config is None:
		config = EngineConfig()
	field = parse_data_field(name)
	if field is None:
		return ""
	return FIELD_RESOLVERS[field](product, custom_text, config)


#============================================
def resolve_source_text(
	element: LabelElement,
	product: Product,
	custom_text: str = "",
	config: EngineConfig | None = None,
) -> str:
	"""
	Get the unwrapped text for a text element.

	Args:
		element: Text element.
		product: Product record.
		custom_text: Job-level custom text.
		config: Engine configuration.

	Returns:
		Literal content or the resolved data field.
	"""
	if element.content:
		return element.content
	if element.data_field:
		return resolve_field(element.data_field, product, custom_text, config)
	return ""


#============================================
def resolve_barcode_data(
	element: LabelElement,
	product: Product,
	config: EngineConfig | None = None,
) -> str:
	"""
	Get the data string encoded by a barcode element.

	Args:
		element: Barcode element.
		product: Product record.
		config: Engine configuration, used by currency fields.

	Returns:
		Barcode, SKU, or a "BC<id>" code when both are empty.
	"""
	field_name = element.data_field or DataField.BARCODE.value
	if element.content:
		data = element.content
	else:
		data = resolve_field(field_name, product, config=config)
	if not data:
		data = product.barcode or product.sku or f"BC{product.id}"
	return str(data)


#============================================
def wrap_words(text: str, measure: MeasureFunc, max_width: float) -> list[str]:
	"""
	Greedily pack whitespace separated words into lines.

	Args:
		text: Input text. Newlines start a new paragraph.
		measure: Returns the rendered width of a string.
		max_width: Maximum line width in pixels.

	Returns:
		Wrapped lines. A word wider than max_width sits alone on its line.
	"""
	lines: list[str] = []
	for paragraph in text.splitlines():
		words = paragraph.split()
		current = ""
		for word in words:
			candidate = word if not current else f"{current} {word}"
			if measure(candidate) <= max_width or not current:
				current = candidate
				continue
			lines.append(current)
			current = word
		if current:
			lines.append(current)
	return lines


#============================================
def layout_text(
	element: LabelElement,
	product: Product,
	custom_text: str,
	measure: MeasureFunc,
	config: EngineConfig | None = None,
	scale: float = 1.0,
) -> list[str]:
	"""
	Resolve and wrap the lines of a text element.

	Args:
		element: Text element.
		product: Product record.
		custom_text: Job-level custom text.
		measure: Width function for the element's active font.
		config: Engine configuration.
		scale: Pixel scale factor of the target surface.

	Returns:
		Lines top to bottom. Empty when the resolved text is empty.
	"""
	if config is None:
		config = EngineConfig()
	width_px = mm_to_pixels(element.width, config.dpi) * scale
	max_width = width_px - config.text_inset * scale
	source = resolve_source_text(element, product, custom_text, config)
	lines = wrap_words(source, measure, max_width)
	if element.append_custom_text and custom_text and custom_text.strip():
		lines.extend(wrap_words(custom_text, measure, max_width))
	return lines


#============================================
def template_uses_custom_text(template: LabelTemplate) -> bool:
	"""
	Check whether any element consumes the job custom text.

	Args:
		template: Label template.

	Returns:
		True if an element is bound to or appends the custom text.
	"""
	for element in template.elements:
		if element.kind != "text":
			continue
		if element.append_custom_text:
			return True
		if not element.content and parse_data_field(element.data_field) is DataField.CUSTOM_TEXT:
			return True
	return False
