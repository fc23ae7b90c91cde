import pytest

import pos_label_engine.config


#============================================
def test_mm_to_pixels_default_dpi() -> None:
	"""
	One inch of millimeters maps to the DPI value.
	"""
	assert pos_label_engine.config.mm_to_pixels(25.4) == pytest.approx(96.0)
	assert pos_label_engine.config.mm_to_pixels(80) == pytest.approx(302.362, abs=0.001)


#============================================
def test_mm_to_pixels_custom_dpi_and_sign() -> None:
	"""
	Custom DPI scales linearly and negative input stays negative.
	"""
	assert pos_label_engine.config.mm_to_pixels(25.4, dpi=300) == pytest.approx(300.0)
	assert pos_label_engine.config.mm_to_pixels(-10) < 0
	assert pos_label_engine.config.mm_to_pixels(0) == 0
