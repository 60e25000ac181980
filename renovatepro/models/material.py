from pydantic import BaseModel, Field
from renovatepro.models.shared import new_id, PLACEHOLDER_IMAGE_URL


class Material(BaseModel):
    """Catalog entry in the materials library. Spaces reference, never own, these."""
    id: str = Field(default_factory=new_id)
    name: str
    category: str
    sub_category: str = ""
    description: str = ""
    image_url: str = PLACEHOLDER_IMAGE_URL

    model_config = {"frozen": True}


class MaterialCreate(BaseModel):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    sub_category: str = ""
    description: str = ""
    image_url: str | None = None


class MaterialUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    category: str | None = Field(default=None, min_length=1)
    sub_category: str | None = None
    description: str | None = None
    image_url: str | None = None
