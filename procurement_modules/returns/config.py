"""
Returns Configuration Schema.

Defines the structure and sensible defaults for return-lifecycle settings.
Actual values are loaded from the ``returns:`` section of a YAML file at
runtime (see ``procurement_config.loader``).
"""

from dataclasses import asdict, dataclass
from typing import Any, Self

from procurement_kernel.logging_config import get_logger

logger = get_logger("modules.returns.config")


@dataclass
class ReturnsConfig:
    """
    Configuration schema for the returns module.

    Field defaults mirror the limits the procurement system has always
    enforced.  Override at instantiation:

        config = ReturnsConfig(single_return_per_line_item=False)

    or load from YAML with
    ``procurement_config.loader.load_returns_config(path)``.
    """

    # Reasons
    max_return_reason_length: int = 1000
    max_short_close_reason_length: int = 500

    # Return requests
    single_return_per_line_item: bool = True

    # Receiving
    allow_receipt_above_requested: bool = False

    # Quantities are stored at this scale
    quantity_places: int = 3

    def __post_init__(self):
        for name in (
            "max_return_reason_length",
            "max_short_close_reason_length",
            "quantity_places",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")

        logger.info(
            "returns_config_initialized",
            extra={
                "max_return_reason_length": self.max_return_reason_length,
                "max_short_close_reason_length": self.max_short_close_reason_length,
                "single_return_per_line_item": self.single_return_per_line_item,
                "allow_receipt_above_requested": self.allow_receipt_above_requested,
                "quantity_places": self.quantity_places,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the standard limits."""
        logger.info("returns_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from dictionary (e.g., loaded from a YAML file).

        Unknown keys raise ``TypeError``, as the dataclass constructor does.
        """
        logger.info(
            "returns_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
