# Configuration file for the Sphinx documentation builder.
#
# For the full list of built-in configuration values, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import os
import sys

# Project root holds the predictor, bus and sim packages
sys.path.insert(0, os.path.abspath("../.."))

project = 'Collision Warning'
copyright = '2026, Collision Warning contributors'
author = 'Collision Warning contributors'
release = '0.1'

# -- General configuration ---------------------------------------------------

extensions = [
    "sphinx.ext.autodoc",    # generate docs from docstrings
    "sphinx.ext.napoleon",   # parse NumPy style docstrings
    "sphinx.ext.viewcode",   # add links to source code
    "sphinx_rtd_dark_mode"
]

templates_path = ['_templates']
exclude_patterns = []
autodoc_member_order = "bysource"

# -- Options for HTML output -------------------------------------------------

html_theme = "sphinx_rtd_theme"
default_dark_mode = True
html_static_path = ['_static']

# -- Mock imports --
# The REST server is optional; its stack is not needed to document the core.
autodoc_mock_imports = ["fastapi", "pydantic", "uvicorn"]
