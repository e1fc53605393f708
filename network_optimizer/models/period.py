"""Planning period model."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Period(BaseModel):
    """Planning period.

    Periods only partition the model; nothing carries over between them.
    """
    period_id: str = Field(..., description="Unique period identifier")
    name: str = Field(default="", description="Period name")
    start_date: Optional[date] = Field(None, description="First day of the period")
    end_date: Optional[date] = Field(None, description="Last day of the period")

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="after")
    def end_not_before_start(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError(
                f"Period {self.period_id}: end_date ({self.end_date}) "
                f"is before start_date ({self.start_date})"
            )
        return self
