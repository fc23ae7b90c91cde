"""
Shared pytest setup: repo imports and the built-in template catalog.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
import pos_label_engine.template


#============================================
@pytest.fixture(scope="session")
def template_catalog() -> list:
	"""
	Built-in label templates, loaded once per session.
	"""
	return pos_label_engine.template.load_template_catalog()


#============================================
@pytest.fixture
def standard_template(template_catalog: list) -> pos_label_engine.template.LabelTemplate:
	"""
	The standard 80x40mm product label.
	"""
	return pos_label_engine.template.find_template(template_catalog, "standard-80x40")
