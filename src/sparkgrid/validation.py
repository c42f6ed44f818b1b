"""Validation utilities for SparkGrid assets and settings."""

from typing import Any, Iterable, Optional, Union, Type, Tuple

from .exceptions import ValidationError, ValidationTypeError, ValidationRangeError
from .models import Asset, AssetType, AssetStatus

class Validator:
    """Base validator class."""

    @staticmethod
    def validate_type(value: Any, expected_type: Union[Type, Tuple[Type, ...]]) -> None:
        """Validate value type."""
        if not isinstance(value, expected_type):
            names = (
                "/".join(t.__name__ for t in expected_type)
                if isinstance(expected_type, tuple) else expected_type.__name__
            )
            raise ValidationTypeError(
                f"Expected type {names}, got {type(value).__name__}"
            )

    @staticmethod
    def validate_range(
        value: Union[int, float],
        min_value: Optional[Union[int, float]] = None,
        max_value: Optional[Union[int, float]] = None
    ) -> None:
        """Validate numeric range."""
        if min_value is not None and value < min_value:
            raise ValidationRangeError(f"Value {value} is below minimum {min_value}")

        if max_value is not None and value > max_value:
            raise ValidationRangeError(f"Value {value} exceeds maximum {max_value}")

class AssetValidator(Validator):
    """Validator for asset records."""

    @staticmethod
    def validate_capacity(capacity: float) -> None:
        """Validate asset capacity."""
        Validator.validate_type(capacity, (int, float))
        Validator.validate_range(capacity, min_value=0)

    @staticmethod
    def validate_position(x: float, y: float) -> None:
        """Validate map coordinates."""
        for value in (x, y):
            Validator.validate_type(value, (int, float))
            Validator.validate_range(value, min_value=0, max_value=100)

    @staticmethod
    def validate_asset(asset: Asset) -> None:
        """Validate a single asset record."""
        if not asset.id:
            raise ValidationError("Asset id must be a non-empty string")
        if not isinstance(asset.type, AssetType):
            raise ValidationTypeError(f"Invalid asset type: {asset.type!r}")
        if not isinstance(asset.status, AssetStatus):
            raise ValidationTypeError(f"Invalid asset status: {asset.status!r}")
        AssetValidator.validate_capacity(asset.capacity)
        AssetValidator.validate_position(asset.x, asset.y)
        Validator.validate_type(asset.current_output, (int, float))
        # Seed data may start batteries charging, so the bound is on magnitude.
        if abs(asset.current_output) > asset.capacity:
            raise ValidationRangeError(
                f"Asset {asset.id}: output {asset.current_output} exceeds capacity {asset.capacity}"
            )

def validate_assets(assets: Iterable[Asset]) -> None:
    """Validate a collection of assets, including id uniqueness."""
    seen = set()
    for asset in assets:
        AssetValidator.validate_asset(asset)
        if asset.id in seen:
            raise ValidationError(f"Duplicate asset id: {asset.id}")
        seen.add(asset.id)
