from enum import Enum
from datetime import datetime, timezone
from pydantic import BaseModel, Field
from renovatepro.models.material import Material
from renovatepro.models.shared import new_id


class ProjectStatus(str, Enum):
    OPEN_QUOTE = "Open Quote"
    OPEN_JOB = "Open Job"
    COMPLETE = "Complete"


class ProjectSpace(BaseModel):
    """A named sub-area of a project with its own before/after photos."""
    id: str = Field(default_factory=new_id)
    name: str = "New Space"
    before_image: str | None = None
    after_image: str | None = None
    description: str = ""
    materials: list[Material] = []


class Project(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    cover_photo: str | None = None
    date: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    status: str = ProjectStatus.OPEN_QUOTE.value
    client_name: str = ""
    client_email: str = ""
    client_address: str = ""
    client_phone: str = ""
    quote_amount: float = 0
    spaces: list[ProjectSpace] = []
    description: str = ""

    @property
    def display_image(self) -> str | None:
        """Cover photo, falling back to the first space's after image."""
        if self.cover_photo:
            return self.cover_photo
        if self.spaces:
            return self.spaces[0].after_image
        return None


class ProjectStatusUpdate(BaseModel):
    status: str


class ProjectSummary(BaseModel):
    """Card view of a project for the dashboard list."""
    id: str
    name: str
    status: str
    client_name: str
    quote_amount: float
    date: str
    space_count: int
    display_image: str | None = None

    @classmethod
    def from_project(cls, project: Project) -> "ProjectSummary":
        return cls(
            id=project.id,
            name=project.name,
            status=project.status,
            client_name=project.client_name,
            quote_amount=project.quote_amount,
            date=project.date,
            space_count=len(project.spaces),
            display_image=project.display_image,
        )
