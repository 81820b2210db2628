from pydantic import BaseModel, ConfigDict, Field


class SiteSettings(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(min_length=1, max_length=64)
    name: str = ""
    really_delete_users: bool = True
