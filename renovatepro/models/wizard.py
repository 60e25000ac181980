from enum import Enum
from pydantic import BaseModel, Field
from renovatepro.agents.generation import Resolution
from renovatepro.models.material import Material
from renovatepro.models.project import ProjectSpace, ProjectStatus


class WizardMode(str, Enum):
    NEW_PROJECT = "new-project"
    ADD_SPACE = "add-space"
    EDIT_SPACE = "edit-space"


class Track(str, Enum):
    CUSTOM = "custom"
    AI = "ai"


class ProjectInfo(BaseModel):
    """Draft project fields collected in the first wizard step."""
    name: str = ""
    client_name: str = ""
    client_email: str = ""
    client_address: str = ""
    client_phone: str = ""
    quote_amount: float = Field(default=0, ge=0)
    status: str = ProjectStatus.OPEN_QUOTE.value


class TrackResult(BaseModel):
    image: str | None = None
    text: str = ""
    error: str | None = None


class WizardStart(BaseModel):
    mode: WizardMode
    project_id: str | None = None
    space_id: str | None = None


class SpaceNameUpdate(BaseModel):
    name: str = Field(min_length=1)


class DescriptionsUpdate(BaseModel):
    vision: str | None = None
    ai_suggestion: str | None = None


class MaterialFilterUpdate(BaseModel):
    category: str | None = None
    sub_category: str | None = None


class TrackSelect(BaseModel):
    track: Track


class PreviewOptions(BaseModel):
    resolution: Resolution | None = None
    include_electrical: bool | None = None
    include_plumbing: bool | None = None
    pull_permit: bool | None = None


class RefineRequest(BaseModel):
    instruction: str = Field(min_length=1)


class DictationFragment(BaseModel):
    text: str


class MaterialView(BaseModel):
    """Catalog view for the materials step, derived from the two filter selections."""
    categories: list[str]
    sub_categories: list[str]
    selected_category: str | None = None
    selected_sub_category: str | None = None
    materials: list[Material]
    selected_ids: list[str]


class WizardState(BaseModel):
    id: str
    mode: WizardMode
    project_id: str | None = None
    step: int
    loading: bool
    project_info: ProjectInfo
    space: ProjectSpace
    ai_suggestion: str
    custom: TrackResult
    ai: TrackResult
    active_track: Track
    active_image: str | None = None
    include_electrical: bool
    include_plumbing: bool
    pull_permit: bool
    resolution: Resolution
    refinement_prompt: str
    listening: bool
    can_advance: bool
