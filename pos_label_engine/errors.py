"""
Exception types raised by the label engine.
"""


class LabelEngineError(Exception):
	"""
	Base class for label engine failures.
	"""


class ValidationError(LabelEngineError, ValueError):
	"""
	Malformed template, element geometry, or print job.
	"""

	def __init__(self, field: str, message: str) -> None:
		super().__init__(f"{field}: {message}")
		self.field = field


class BarcodeRenderError(LabelEngineError):
	"""
	Barcode data could not be encoded in the requested symbology.
	"""


class PrintUnavailable(LabelEngineError):
	"""
	The print surface or print facility could not be used.
	"""
