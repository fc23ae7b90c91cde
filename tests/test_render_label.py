import PIL.Image
import pytest

import pos_label_engine.config
import pos_label_engine.errors
import pos_label_engine.products
import pos_label_engine.render
import pos_label_engine.template


LabelElement = pos_label_engine.template.LabelElement
LabelTemplate = pos_label_engine.template.LabelTemplate
PrintJob = pos_label_engine.template.PrintJob
Product = pos_label_engine.products.Product

mm_to_pixels = pos_label_engine.config.mm_to_pixels

PADDING = pos_label_engine.config.DEFAULT_PADDING
WHITE = (255, 255, 255)


#============================================
def build_products(count: int = 2) -> list[Product]:
	"""
	Build grocery products for tests, without barcodes.
	"""
	return [
		Product(id=index, name=f"Basmati Rice {index}kg", sku=f"ABC{index}23", price=45.0 * index)
		for index in range(1, count + 1)
	]


#============================================
def build_template(elements: tuple = (), **overrides) -> LabelTemplate:
	"""
	Build an 80x40mm template with the given elements.
	"""
	values = {
		"id": "test-80x40",
		"name": "Test 80x40mm",
		"width": 80.0,
		"height": 40.0,
		"elements": elements,
	}
	values.update(overrides)
	return LabelTemplate(**values)


#============================================
def build_job(ids, **overrides) -> PrintJob:
	"""
	Build a print job for the given product ids.
	"""
	values = {"selected_product_ids": frozenset(ids), "template_id": "test-80x40"}
	values.update(overrides)
	return PrintJob(**values)


#============================================
def element_box(element: LabelElement, origin: float = PADDING) -> tuple[int, int, int, int]:
	"""
	Pixel box of an element in the first cell of a preview sheet.
	"""
	left = origin + mm_to_pixels(element.x)
	top = origin + mm_to_pixels(element.y)
	return (
		int(left),
		int(top),
		int(left + mm_to_pixels(element.width)) + 1,
		int(top + mm_to_pixels(element.height)) + 1,
	)


#============================================
def darkest(image: PIL.Image.Image, box: tuple[int, int, int, int]) -> int:
	"""
	Return the darkest grayscale value inside a box.
	"""
	return image.crop(box).convert("L").getextrema()[0]


#============================================
def test_rendering_is_idempotent(standard_template: LabelTemplate) -> None:
	"""
	Rendering the same inputs twice yields identical pixels.
	"""
	template = standard_template
	products = build_products(3)
	job = build_job({1, 2, 3}, copies_per_product=2, custom_text="SALE")
	first = pos_label_engine.render.render_preview(products, template, job)
	second = pos_label_engine.render.render_preview(products, template, job)
	assert first.image.size == second.image.size
	assert first.image.tobytes() == second.image.tobytes()
	assert first.label_count == 6


#============================================
def test_preview_size_for_two_products(standard_template: LabelTemplate) -> None:
	"""
	Two 80x40mm labels fit in one row of the minimum preview sheet.
	"""
	template = standard_template
	result = pos_label_engine.render.render_preview(build_products(2), template, build_job({1, 2}))
	assert result.image.size == (800, 500)
	assert result.layout.columns == 2
	assert result.label_count == 2
	assert result.stats.labels == 2
	assert result.stats.barcode_fallbacks == 0


#============================================
def test_empty_selection_renders_placeholder() -> None:
	"""
	No selected products gives the placeholder sheet, not an error.
	"""
	result = pos_label_engine.render.render_preview(build_products(2), build_template(), build_job(set()))
	assert result.image.size == (800, 500)
	assert result.label_count == 0
	assert result.layout is None
	assert result.image.getpixel((5, 5)) == (248, 249, 250)
	# hint text is drawn around the center
	assert darkest(result.image, (200, 230, 600, 270)) < 200


#============================================
def test_unknown_ids_are_ignored() -> None:
	"""
	Selected ids without a product do not produce labels.
	"""
	result = pos_label_engine.render.render_preview(build_products(2), build_template(), build_job({2, 99}))
	assert result.label_count == 1


#============================================
def test_barcode_failure_is_isolated() -> None:
	"""
	An unencodable barcode degrades to a grey text box and rendering continues.
	"""
	barcode_element = LabelElement(kind="barcode", x=5, y=25, width=70, height=10, barcode_type="EAN13")
	name_element = LabelElement(kind="text", x=5, y=2, width=70, height=12, data_field="name", font_size=14)
	template = build_template((name_element, barcode_element))
	result = pos_label_engine.render.render_preview(build_products(1), template, build_job({1}))
	assert result.stats.barcode_fallbacks == 1
	assert len(result.stats.fallback_messages) == 1
	left, top, _right, _bottom = element_box(barcode_element)
	assert result.image.getpixel((left + 2, top + 2)) == (240, 240, 240)
	# the other elements of the label still render
	assert darkest(result.image, element_box(name_element)) < 128


#============================================
def test_linear_barcode_is_pasted() -> None:
	"""
	An encodable barcode paints bars inside its element box.
	"""
	barcode_element = LabelElement(kind="barcode", x=5, y=5, width=70, height=30, barcode_type="CODE128")
	template = build_template((barcode_element,))
	result = pos_label_engine.render.render_preview(build_products(1), template, build_job({1}))
	assert result.stats.barcode_fallbacks == 0
	assert darkest(result.image, element_box(barcode_element)) < 64


#============================================
def test_invalid_template_fails_before_allocation(monkeypatch: pytest.MonkeyPatch) -> None:
	"""
	Template validation runs before any surface is created.
	"""
	def fail_create_surface(width: float, height: float) -> PIL.Image.Image:
		raise AssertionError("surface allocated for an invalid template")

	monkeypatch.setattr(pos_label_engine.render, "create_surface", fail_create_surface)
	with pytest.raises(pos_label_engine.errors.ValidationError):
		pos_label_engine.render.render_preview(build_products(1), build_template(width=0.0), build_job({1}))
	with pytest.raises(pos_label_engine.errors.ValidationError):
		pos_label_engine.render.render_preview(build_products(1), build_template(), build_job({1}, copies_per_product=0))


#============================================
def test_background_and_border_colors() -> None:
	"""
	The label background fills the cell and the border uses its color.
	"""
	template = build_template(background_color="#ff0000", border_width=2.0, border_color="#0000ff")
	result = pos_label_engine.render.render_preview(build_products(1), template, build_job({1}))
	assert result.image.getpixel((40, 40)) == (255, 0, 0)
	assert result.image.getpixel((int(PADDING), 40)) == (0, 0, 255)
	# sheet outside the label stays white
	assert result.image.getpixel((5, 5)) == WHITE


#============================================
def test_text_stays_inside_label() -> None:
	"""
	Text paints inside its element box and nothing lands beside the label.
	"""
	element = LabelElement(kind="text", x=2, y=2, width=60, height=15, content="WWWW", font_size=20)
	template = build_template((element,))
	result = pos_label_engine.render.render_preview(build_products(1), template, build_job({1}))
	assert darkest(result.image, element_box(element)) < 100
	label_right = int(PADDING + mm_to_pixels(80)) + 2
	assert darkest(result.image, (label_right, 0, 800, 500)) == 255


#============================================
def test_overflowing_element_is_counted() -> None:
	"""
	Elements past the label edge are drawn and counted, not rejected.
	"""
	element = LabelElement(kind="rectangle", x=70, y=5, width=20, height=10, color="#000000")
	template = build_template((element,))
	result = pos_label_engine.render.render_preview(build_products(1), template, build_job({1}))
	assert result.stats.overflow_elements == 1


#============================================
def test_unused_custom_text_draws_footer() -> None:
	"""
	Custom text with no bound element is drawn along the label bottom.
	"""
	element = LabelElement(kind="text", x=5, y=2, width=70, height=10, data_field="name")
	template = build_template((element,))
	label_bottom = int(PADDING + mm_to_pixels(40))
	footer_box = (int(PADDING) + 1, label_bottom - 25, int(PADDING + mm_to_pixels(80)) - 1, label_bottom - 1)
	plain = pos_label_engine.render.render_preview(build_products(1), template, build_job({1}))
	tagged = pos_label_engine.render.render_preview(build_products(1), template, build_job({1}, custom_text="SALE"))
	assert darkest(plain.image, footer_box) == 255
	assert darkest(tagged.image, footer_box) < 200


#============================================
@pytest.mark.parametrize(
	("align", "expected"),
	[
		("left", 0.0),
		("center", 25.0),
		("right", 50.0),
		(" Right ", 50.0),
	],
)
def test_compute_align_offset(align: str, expected: float) -> None:
	"""
	Alignment offsets place content within the available width.
	"""
	assert pos_label_engine.render.compute_align_offset(100.0, 50.0, align) == expected


#============================================
def test_border_color_falls_back_to_config() -> None:
	"""
	A template without its own border color uses the configured one.
	"""
	template = build_template(border_width=2.0)
	assert template.border_color is None
	config = pos_label_engine.config.EngineConfig(border_color="#00ff00")
	result = pos_label_engine.render.render_preview(build_products(1), template, build_job({1}), config)
	assert result.image.getpixel((int(PADDING), 40)) == (0, 255, 0)
	default = pos_label_engine.render.render_preview(build_products(1), template, build_job({1}))
	assert default.image.getpixel((int(PADDING), 40)) == (51, 51, 51)


#============================================
def test_oversized_preview_fails_before_allocation(monkeypatch: pytest.MonkeyPatch) -> None:
	"""
	A preview sheet above the pixel cap is refused without allocating it.
	"""
	def fail_create_surface(width: float, height: float) -> PIL.Image.Image:
		raise AssertionError("surface allocated above the pixel cap")

	monkeypatch.setattr(pos_label_engine.render, "create_surface", fail_create_surface)
	config = pos_label_engine.config.EngineConfig(max_surface_pixels=1_000_000)
	job = build_job({1}, copies_per_product=50)
	with pytest.raises(pos_label_engine.errors.ValidationError) as excinfo:
		pos_label_engine.render.render_preview(build_products(1), build_template(), job, config)
	assert excinfo.value.field == "canvas"
