from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class VisitStatsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_visits: int = Field(alias="totalVisits", ge=0)
    active_users: int = Field(alias="activeUsers", ge=0)
    client_id: str = Field(alias="clientId", min_length=1)
