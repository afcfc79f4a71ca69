from .models import CatalogError, ErrorCode, InputValidationError, PlatformError

__all__ = ["CatalogError", "ErrorCode", "InputValidationError", "PlatformError"]
