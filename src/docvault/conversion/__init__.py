from docvault.conversion.converter import DocumentConverter, normalize_format

__all__ = ["DocumentConverter", "normalize_format"]
