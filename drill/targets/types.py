"""Pydantic models for drill targets."""

from pydantic import BaseModel, ConfigDict


class DrillItem(BaseModel):
    """One practice unit: word key, prompt text, picture, and category.

    ``key`` is the canonical id, underscore-delimited (``touch_your_nose``).
    """

    model_config = ConfigDict(frozen=True)

    key: str
    display: str
    image_path: str
    category: str
