"""Custom exceptions for the font-stack typography system."""

from typing import Any


class TypeStackError(Exception):
    """Base exception for all typestack errors."""

    reason: str | None = None

    def __init__(self, message: str, details: Any | None = None):
        super().__init__(message)
        self.details = details


class ValidationError(TypeStackError):
    """Exception raised for input validation errors."""


class ConfigurationError(TypeStackError):
    """Exception raised for configuration errors."""


class RegistryError(TypeStackError):
    """Exception raised when a font registry mutation is refused."""


class ParseError(TypeStackError):
    """Exception raised when a font file cannot be parsed."""


class ConfigImportError(TypeStackError):
    """Exception raised while importing a configuration document."""


# Registry mutations
class DuplicateFontError(RegistryError):
    """Exception raised when a font with the same identity is already registered."""

    reason = "duplicate_font"

    def __init__(self, identity: str):
        super().__init__(f"Font already registered: {identity}")


class InvalidPrimaryCandidateError(RegistryError):
    """Exception raised when a name-only system font would become primary."""

    reason = "invalid_primary_candidate"

    def __init__(self, font_name: str):
        super().__init__(f"System fonts cannot be used as the primary font: {font_name}")


class CannotRemoveLastFontError(RegistryError):
    """Exception raised when a removal would leave the registry empty."""

    reason = "cannot_remove_last_font"

    def __init__(self):
        super().__init__("Cannot remove the last font in the stack")


class FontNotFoundError(RegistryError):
    """Exception raised when a font id is not present in the registry."""

    reason = "font_not_found"

    def __init__(self, font_id: str):
        super().__init__(f"Font not found: {font_id}")


class IndexOutOfRangeError(RegistryError):
    """Exception raised for reorder indices outside the registry."""

    reason = "index_out_of_range"

    def __init__(self, index: int, size: int):
        super().__init__(f"Index {index} out of range for stack of {size} fonts")


class MissingGlyphDataError(RegistryError):
    """Exception raised when a primary load has neither glyph data nor a file name."""

    reason = "missing_glyph_data"

    def __init__(self):
        super().__init__("Font has no glyph data and no file name")


class InvalidOverrideValueError(ValidationError):
    """Exception raised for non-positive scale or line-height overrides."""

    reason = "invalid_value"

    def __init__(self, field_name: str, value: Any):
        super().__init__(f"Invalid value for {field_name}: {value}")


# Parsing
class FontParseError(ParseError):
    """Exception raised when the parser rejects a font file."""

    reason = "parse_failure"

    def __init__(self, file_name: str, error: str):
        super().__init__(f"Failed to parse font {file_name}: {error}")


class FontFileTooLargeError(ParseError):
    """Exception raised when a font file exceeds the configured size limit."""

    reason = "parse_failure"

    def __init__(self, file_name: str, size: int, limit: int):
        super().__init__(f"Font file {file_name} is {size} bytes (limit {limit})")


# Config import
class UnresolvableImportReferenceError(ConfigImportError):
    """Exception raised for a config entry with no matching font file."""

    reason = "unresolvable_import_reference"

    def __init__(self, reference: str):
        super().__init__(f"No font file supplied for: {reference}")


class InvalidConfigDocumentError(ConfigImportError):
    """Exception raised when a document is neither versioned nor legacy config."""

    def __init__(self, error: str):
        super().__init__(f"Invalid configuration document: {error}")


class UnsupportedConfigVersionError(ConfigImportError):
    """Exception raised for documents written by a newer format version."""

    def __init__(self, version: int, supported: int):
        super().__init__(f"Unsupported config version {version} (supported up to {supported})")


# Settings files
class ConfigFileNotFoundError(ConfigurationError):
    """Exception raised when configuration file is not found."""

    def __init__(self, config_path: str):
        super().__init__(f"Configuration file not found: {config_path}")


class EmptyConfigFileError(ConfigurationError):
    """Exception raised when configuration file is empty."""

    def __init__(self, config_path: str):
        super().__init__(f"Empty configuration file: {config_path}")


class InvalidYamlError(ConfigurationError):
    """Exception raised for invalid YAML content."""

    def __init__(self, config_path: str, error: str):
        super().__init__(f"Invalid YAML in {config_path}: {error}")


class ConfigLoadError(ConfigurationError):
    """Exception raised when configuration loading fails."""

    def __init__(self, error: str):
        super().__init__(f"Failed to load configuration: {error}")


class UnknownHeaderTagError(ValidationError):
    """Exception raised for header styles outside h1..h6."""

    def __init__(self, tag: str):
        super().__init__(f"Unknown header tag: {tag}")
