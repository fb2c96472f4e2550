"""
Constants for the parser module.
"""

# Default folder names
DEFAULT_MODELS_FOLDER = "models"

# Supported file extensions
SUPPORTED_SQL_EXTENSIONS = [".sql"]

# Default number of worker threads used to parse model files
DEFAULT_PARSE_WORKERS = 8

# Output formats for catalog export
EXPORT_FORMATS = ("json", "yaml")
