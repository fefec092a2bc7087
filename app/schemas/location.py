from pydantic import BaseModel


class LocationOut(BaseModel):
    code: str
    name: str
    is_warehouse: bool


class LocationListOut(BaseModel):
    items: list[LocationOut]
