import json
import pathlib

import pytest

import pos_label_engine.errors
import pos_label_engine.template


LabelElement = pos_label_engine.template.LabelElement
LabelTemplate = pos_label_engine.template.LabelTemplate
ValidationError = pos_label_engine.errors.ValidationError


#============================================
def build_template(**overrides) -> LabelTemplate:
	"""
	Build a small valid template for tests.
	"""
	values = {
		"id": "test",
		"name": "Test 40x20mm",
		"width": 40.0,
		"height": 20.0,
		"elements": (LabelElement(kind="text", x=1, y=1, width=30, height=8, data_field="name"),),
		"border_width": 1.0,
	}
	values.update(overrides)
	return LabelTemplate(**values)


#============================================
def test_valid_template_passes() -> None:
	"""
	A well formed template is returned unchanged.
	"""
	template = build_template()
	assert pos_label_engine.template.validate_template(template) is template


#============================================
@pytest.mark.parametrize(
	("overrides", "field"),
	[
		({"width": 0.0}, "width"),
		({"height": -5.0}, "height"),
		({"border_width": -1.0}, "border_width"),
		({"elements": (LabelElement(kind="text", x=0, y=0, width=0, height=5),)}, "elements[0].width"),
		({"elements": (LabelElement(kind="barcode", x=0, y=0, width=5, height=0),)}, "elements[0].height"),
	],
)
def test_invalid_geometry_names_field(overrides: dict, field: str) -> None:
	"""
	Each geometry violation names the offending field.
	"""
	with pytest.raises(ValidationError) as excinfo:
		pos_label_engine.template.validate_template(build_template(**overrides))
	assert excinfo.value.field == field


#============================================
def test_validation_error_is_value_error() -> None:
	"""
	Callers catching ValueError also see validation failures.
	"""
	with pytest.raises(ValueError):
		pos_label_engine.template.validate_template(build_template(width=0.0))


#============================================
def test_print_job_copies_must_be_positive() -> None:
	"""
	Zero copies per product is rejected.
	"""
	job = pos_label_engine.template.PrintJob(
		selected_product_ids=frozenset({1}),
		template_id="test",
		copies_per_product=0,
	)
	with pytest.raises(ValidationError) as excinfo:
		pos_label_engine.template.validate_print_job(job)
	assert excinfo.value.field == "copies_per_product"


#============================================
def test_template_from_camel_case_dict() -> None:
	"""
	The web designer's camelCase keys map onto the model.
	"""
	data = {
		"id": "shelf",
		"name": "Shelf",
		"width": 60,
		"height": 30,
		"backgroundColor": "#fafafa",
		"borderWidth": 2,
		"elements": [
			{
				"type": "text",
				"x": 5,
				"y": 5,
				"width": 50,
				"height": 20,
				"dataField": "price",
				"fontSize": 16,
				"fontWeight": "bold",
				"textAlign": "center",
			},
			{"type": "barcode", "x": 5, "y": 20, "width": 40, "height": 8, "barcodeType": "EAN13"},
		],
	}
	template = pos_label_engine.template.template_from_dict(data)
	assert template.background_color == "#fafafa"
	assert template.border_width == 2.0
	assert len(template.elements) == 2
	price = template.elements[0]
	assert price.data_field == "price"
	assert price.font_weight == "bold"
	assert price.text_align == "center"
	assert template.elements[1].barcode_type == "EAN13"


#============================================
def test_template_from_dict_rejects_unknown_kind() -> None:
	"""
	Element kinds outside the closed set are rejected.
	"""
	data = {
		"id": "x",
		"name": "x",
		"width": 10,
		"height": 10,
		"elements": [{"type": "image", "x": 0, "y": 0, "width": 5, "height": 5}],
	}
	with pytest.raises(ValidationError):
		pos_label_engine.template.template_from_dict(data)


#============================================
def test_builtin_catalog_loads(template_catalog: list) -> None:
	"""
	The shipped catalog holds the standard templates and all validate.
	"""
	catalog = template_catalog
	ids = [template.id for template in catalog]
	assert "standard-80x40" in ids
	assert "compact-50x30" in ids
	standard = pos_label_engine.template.find_template(catalog, "standard-80x40")
	assert (standard.width, standard.height) == (80.0, 40.0)
	assert [element.kind for element in standard.elements] == ["text", "text", "text", "barcode"]


#============================================
def test_extra_catalog_merges_after_builtin(tmp_path: pathlib.Path) -> None:
	"""
	A custom catalog adds templates and replaces built-ins by id.
	"""
	extra = tmp_path / "custom.json"
	extra.write_text(
		json.dumps(
			[
				{"id": "standard-80x40", "name": "Replaced", "width": 80, "height": 40},
				{"id": "jar", "name": "Jar 30x30mm", "width": 30, "height": 30},
			]
		),
		encoding="utf-8",
	)
	catalog = pos_label_engine.template.load_template_catalog(extra)
	standard = pos_label_engine.template.find_template(catalog, "standard-80x40")
	assert standard.name == "Replaced"
	assert pos_label_engine.template.find_template(catalog, "jar").width == 30.0


#============================================
def test_find_template_unknown_id(template_catalog: list) -> None:
	"""
	Unknown template ids fail validation.
	"""
	catalog = template_catalog
	with pytest.raises(ValidationError) as excinfo:
		pos_label_engine.template.find_template(catalog, "missing")
	assert excinfo.value.field == "template_id"


#============================================
def test_parse_hex_color() -> None:
	"""
	Long and short hex forms parse, malformed values fall back to black.
	"""
	assert pos_label_engine.template.parse_hex_color("#e74c3c") == (231, 76, 60)
	assert pos_label_engine.template.parse_hex_color("#fff") == (255, 255, 255)
	assert pos_label_engine.template.parse_hex_color("red") == (0, 0, 0)
	assert pos_label_engine.template.parse_hex_color("#zzzzzz") == (0, 0, 0)
	assert pos_label_engine.template.parse_hex_color(None) == (0, 0, 0)
