"""Vehicle type model used by full-truck-load lanes."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class VehicleType(BaseModel):
    """Vehicle type with a load capacity and per-trip cost.

    Attributes:
        vehicle_type_id: Unique vehicle type identifier
        name: Display name (reported in vehicle flows)
        capacity: Units one trip can carry
        capacity_unit: Unit the capacity is expressed in
        speed_kmph: Average speed, used to derive transit time from distance
        fixed_cost_per_trip: Cost charged per trip
        var_cost_per_km: Distance-based cost per km (informational)
    """
    vehicle_type_id: str = Field(..., description="Unique vehicle type identifier")
    name: str = Field(default="", description="Vehicle type name")
    capacity: float = Field(..., gt=0, description="Units per trip")
    capacity_unit: str = Field(default="units", description="Capacity unit of measure")
    speed_kmph: Optional[float] = Field(None, gt=0, description="Average speed (km/h)")
    fixed_cost_per_trip: float = Field(default=0.0, ge=0, description="Fixed cost per trip")
    var_cost_per_km: float = Field(default=0.0, ge=0, description="Variable cost per km")

    model_config = ConfigDict(extra="ignore")

    @property
    def display_name(self) -> str:
        return self.name or self.vehicle_type_id
