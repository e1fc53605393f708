"""Product and bill-of-materials models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    """A product moved, produced or consumed in the network."""
    product_id: str = Field(..., description="Unique product identifier")
    name: str = Field(default="", description="Product name")
    uom: str = Field(default="units", description="Unit of measure")
    bom_id: Optional[str] = Field(None, description="Default bill of materials for production")

    model_config = ConfigDict(extra="ignore")


class BOMLine(BaseModel):
    """One component line of a bill of materials.

    Producing end_qty units of the end product consumes raw_qty units of the
    raw product at the same site and period. Several lines sharing a bom_id
    form a multi-component recipe.
    """
    bom_id: str = Field(..., description="Bill of materials identifier")
    end_product_id: str = Field(..., description="Product produced")
    end_qty: float = Field(default=1.0, gt=0, description="Quantity of end product per batch")
    raw_product_id: str = Field(..., description="Component consumed")
    raw_qty: float = Field(default=1.0, ge=0, description="Quantity of component per batch")

    model_config = ConfigDict(extra="ignore")

    @property
    def consumption_ratio(self) -> float:
        """Units of raw product consumed per unit of end product."""
        return self.raw_qty / self.end_qty
