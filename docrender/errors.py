from __future__ import annotations


class RenderError(Exception):
    """Base class for failures that abort a render call."""


class FontLoadError(RenderError):
    def __init__(self, variant_key: str, url: str, reason: str) -> None:
        super().__init__(f"Failed to load font {variant_key} from {url}: {reason}")
        self.variant_key = variant_key
        self.url = url
        self.reason = reason


class UnsupportedDocumentTypeError(RenderError):
    def __init__(self, document_type: object) -> None:
        super().__init__(f"Unsupported document type: {document_type!r}")
        self.document_type = document_type


class OutputEncodingError(RenderError):
    pass


class DownloadEnvironmentError(RenderError):
    pass


class LogoLoadError(RenderError):
    pass


class InvalidOptionsError(RenderError):
    """Render options that cannot be coerced into ``RenderOptions``."""
