# app/schemas/occupancy.py
from pydantic import BaseModel
from typing import Optional


class OccupancySnapshot(BaseModel):
    total_spots: int
    occupied_spots: int
    per_type_availability: dict[str, int]    # spot type → vacant count
    active_zone_id: Optional[int]            # lowest floor's active zone
    active_zones: dict[int, Optional[int]]   # floor id → active zone id


class ZoneOut(BaseModel):
    id: int
    floor_id: int
    name: str
    status: str
    fill_priority: int
    capacity: int
    occupied_count: int
    occupancy_percent: Optional[float] = None

    class Config:
        from_attributes = True
