"""
Barcode and QR image generation.
"""

# PIP3 modules
import barcode
import barcode.errors
import barcode.writer
import PIL.Image
import qrcode
import qrcode.constants
import qrcode.exceptions

# local repo modules
import pos_label_engine as ple
import pos_label_engine.errors


BarcodeRenderError = ple.errors.BarcodeRenderError

# symbology names used by templates mapped to python-barcode names
LINEAR_SYMBOLOGIES = {
	"CODE128": "code128",
	"CODE128A": "code128",
	"CODE128B": "code128",
	"CODE128C": "code128",
	"CODE39": "code39",
	"EAN13": "ean13",
	"EAN8": "ean8",
	"EAN14": "ean14",
	"JAN": "jan",
	"UPC": "upca",
	"UPCA": "upca",
	"ITF": "itf",
	"ITF14": "itf",
	"ISBN13": "isbn13",
	"ISBN10": "isbn10",
	"ISSN": "issn",
	"PZN": "pzn",
	"GS1_128": "gs1_128",
}
QR_SYMBOLOGIES = ("QR", "QRCODE")

LINEAR_WRITER_OPTIONS = {
	"module_width": 0.33,
	"module_height": 12.0,
	"quiet_zone": 2.0,
	"font_size": 8,
	"text_distance": 3.0,
	"write_text": True,
	"background": "white",
	"foreground": "black",
}


#============================================
def normalize_symbology(name: str | None) -> str:
	"""
	Normalize a symbology name like "code-128" to "CODE128".

	Args:
		name: Symbology identifier from a template.

	Returns:
		Upper-case identifier without separators.
	"""
	if not name:
		return "CODE128"
	return name.strip().upper().replace("-", "").replace(" ", "")


#============================================
def generate_linear_barcode(data: str, symbology: str) -> PIL.Image.Image:
	"""
	Render a linear barcode with python-barcode.

	Args:
		data: Data string to encode.
		symbology: Normalized symbology identifier.

	Returns:
		RGB image.
	"""
	barcode_name = LINEAR_SYMBOLOGIES.get(symbology, symbology.lower())
	try:
		barcode_class = barcode.get_barcode_class(barcode_name)
		code = barcode_class(data, writer=barcode.writer.ImageWriter())
		image = code.render(dict(LINEAR_WRITER_OPTIONS))
	except (barcode.errors.BarcodeError, ValueError, KeyError) as error:
		raise BarcodeRenderError(f"cannot encode {data!r} as {symbology}: {error}") from error
	return image.convert("RGB")


#============================================
def generate_qr_code(data: str) -> PIL.Image.Image:
	"""
	Render a QR code with qrcode.

	Args:
		data: Data string to encode.

	Returns:
		RGB image.
	"""
	qr = qrcode.QRCode(
		version=None,
		error_correction=qrcode.constants.ERROR_CORRECT_M,
		box_size=10,
		border=2,
	)
	try:
		qr.add_data(data)
		qr.make(fit=True)
	except (qrcode.exceptions.DataOverflowError, ValueError) as error:
		raise BarcodeRenderError(f"cannot encode {data!r} as QR: {error}") from error
	image = qr.make_image(fill_color="black", back_color="white").get_image()
	return image.convert("RGB")


#============================================
def generate_barcode(data: str, symbology: str | None = None) -> PIL.Image.Image:
	"""
	Render a barcode image for a data string.

	Args:
		data: Data string to encode.
		symbology: Symbology identifier, e.g. "CODE128", "EAN13" or "QR".

	Returns:
		RGB image to be scaled onto the label.
	"""
	if not data:
		raise BarcodeRenderError("empty barcode data")
	normalized = normalize_symbology(symbology)
	if normalized in QR_SYMBOLOGIES:
		return generate_qr_code(data)
	return generate_linear_barcode(data, normalized)


#============================================
def is_square_symbology(symbology: str | None) -> bool:
	"""
	Check whether a symbology renders as a square matrix.

	Args:
		symbology: Symbology identifier.

	Returns:
		True for QR codes.
	"""
	return normalize_symbology(symbology) in QR_SYMBOLOGIES
