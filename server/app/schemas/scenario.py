from typing import Optional

from pydantic import BaseModel


class ScenarioResponse(BaseModel):
    id: str
    title: str
    description: Optional[str]
    phases: list[str]
    is_active: bool

    model_config = {"from_attributes": True}
