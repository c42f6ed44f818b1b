"""Custom exceptions for the SparkGrid virtual power plant."""

class SparkGridError(Exception):
    """Base exception for SparkGrid errors."""
    pass

class ConfigurationError(SparkGridError):
    """Exception raised for configuration errors."""
    pass

class ValidationError(SparkGridError):
    """Base exception for validation errors."""
    pass

class ValidationTypeError(ValidationError):
    """Exception raised for type validation errors."""
    pass

class ValidationRangeError(ValidationError):
    """Exception raised for range validation errors."""
    pass

class AssetError(SparkGridError):
    """Exception raised for asset-related errors."""
    pass

class AssetNotFoundError(AssetError):
    """Exception raised when an asset is not found in the registry."""
    pass

class ScenarioError(SparkGridError):
    """Exception raised for unknown or malformed scenarios."""
    pass

class AdvisoryError(SparkGridError):
    """Exception raised by advisory clients when advice cannot be produced."""
    pass
