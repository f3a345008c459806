"""Sphinx configuration for Calendar Events API documentation."""

import os
import sys
from datetime import datetime
from importlib.metadata import PackageNotFoundError, version as package_version

sys.path.insert(0, os.path.abspath(".."))

# autodoc imports calendar_api.database, which builds an engine from settings
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

project = "Calendar Events API"
current_year = datetime.now().year
copyright = f"{current_year}, Calendar Events"
author = "Calendar Events Team"

try:
    release = package_version("calendar-events-api")
except PackageNotFoundError:
    release = "0.1.0"
version = ".".join(release.split(".")[:2])

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
]

autodoc_member_order = "bysource"
autodoc_default_options = {
    "members": True,
    "show-inheritance": True,
}
napoleon_google_docstring = True
napoleon_numpy_docstring = False

templates_path = ["_templates"]
exclude_patterns: list[str] = ["_build"]

html_theme = "alabaster"
html_title = f"{project} {release}"
