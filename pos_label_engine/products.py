"""
Product records and product selection.
"""

# Standard Library
import dataclasses
import json
import pathlib

# local repo modules
import pos_label_engine as ple
import pos_label_engine.errors


ValidationError = ple.errors.ValidationError


@dataclasses.dataclass(frozen=True)
class Product:
	id: int
	name: str
	sku: str
	price: float
	mrp: float | None = None
	barcode: str | None = None
	category: str | None = None
	weight: float | None = None
	weight_unit: str | None = None
	hsn_code: str | None = None


#============================================
def parse_optional_number(value, field: str = "value") -> float | None:
	"""
	Parse an optional numeric value.

	Args:
		value: Number, numeric string, or None.
		field: Field name reported when the value is not a number.

	Returns:
		Float value or None when missing or blank.
	"""
	if value is None:
		return None
	if isinstance(value, str):
		value = value.strip()
		if not value:
			return None
	try:
		return float(value)
	except (TypeError, ValueError) as error:
		raise ValidationError(field, f"not a number: {value!r}") from error


#============================================
def product_from_dict(data: dict) -> Product:
	"""
	Build a Product from an API or JSON record.

	Args:
		data: Product mapping with camelCase or snake_case keys.

	Returns:
		Product.
	"""
	if not isinstance(data, dict):
		raise ValidationError("product", f"expected an object, got {type(data).__name__}")
	if data.get("id") is None:
		raise ValidationError("id", "missing product id")
	try:
		product_id = int(data["id"])
	except (TypeError, ValueError) as error:
		raise ValidationError("id", f"not an integer: {data['id']!r}") from error
	category = data.get("category")
	if isinstance(category, dict):
		category = category.get("name")
	if category is None:
		category = data.get("category_name") or data.get("categoryName")
	price = parse_optional_number(data.get("price"), "price")
	barcode = data.get("barcode")
	hsn_code = data.get("hsn_code") or data.get("hsnCode")
	return Product(
		id=product_id,
		name=str(data.get("name") or ""),
		sku=str(data.get("sku") or ""),
		price=price if price is not None else 0.0,
		mrp=parse_optional_number(data.get("mrp"), "mrp"),
		barcode=str(barcode) if barcode else None,
		category=str(category) if category else None,
		weight=parse_optional_number(data.get("weight"), "weight"),
		weight_unit=data.get("weight_unit") or data.get("weightUnit"),
		hsn_code=str(hsn_code) if hsn_code else None,
	)


#============================================
def load_products(path: pathlib.Path) -> list[Product]:
	"""
	Load products from a JSON file.

	Args:
		path: JSON file holding a list, or an object with a "products" list.

	Returns:
		List of Product records in file order.
	"""
	with pathlib.Path(path).open("r", encoding="utf-8") as handle:
		try:
			payload = json.load(handle)
		except json.JSONDecodeError as error:
			raise ValidationError("products", f"{path}: {error}") from error
	if isinstance(payload, dict):
		payload = payload.get("products", [])
	return [product_from_dict(entry) for entry in payload]


#============================================
def filter_products(
	products: list[Product],
	search: str = "",
	category: str | None = None,
) -> list[Product]:
	"""
	Filter products by search term and category.

	Args:
		products: Products to filter.
		search: Case-insensitive term matched against name, SKU and barcode.
		category: Category name, or None/"all" for any.

	Returns:
		Matching products in source order.
	"""
	term = search.strip().lower()
	result: list[Product] = []
	for product in products:
		if term:
			haystack = [product.name.lower(), product.sku.lower()]
			if product.barcode:
				haystack.append(product.barcode.lower())
			if not any(term in value for value in haystack):
				continue
		if category and category != "all" and product.category != category:
			continue
		result.append(product)
	return result


#============================================
def select_products(products: list[Product], selected_ids) -> list[Product]:
	"""
	Pick the selected products, keeping source order.

	Args:
		products: All products.
		selected_ids: Collection of product ids.

	Returns:
		Selected products. Unknown ids are ignored.
	"""
	wanted = set(selected_ids)
	return [product for product in products if product.id in wanted]
