"""Common literal values used across docxes.

These constants keep filenames, cache-format markers, and ordering sentinels
centralized so the build pipeline, the read path, and tests import the same
values without drifting. Intended for internal use within the docxes package.

Examples
--------
>>> from docxes import _constants
>>> _constants.MANIFEST_FILENAME
'manifest.json'
>>> _constants.LANDING_NAMES
('main', 'index')
"""

MANIFEST_FILENAME = "manifest.json"
FILE_HASHES_FILENAME = "file-hashes.json"
DATA_DIRNAME = "data"
BLOB_DIRNAME = "cache"
SEARCH_INDEX_FILENAME = "search-index.json"
SITEMAP_FILENAME = "sitemap.xml"

# Bump whenever the shape of cached processor output changes.
CACHE_FORMAT_VERSION = "3"

DOC_EXTENSIONS = (".mdx", ".md")
LANDING_NAMES = ("main", "index")
DEFAULT_ORDER = 999
