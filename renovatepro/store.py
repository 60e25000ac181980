"""Application context: the root owner of all in-memory state.

Routers never hold state of their own. They receive the context through the
get_context dependency and change it only through the narrow mutators below.
Nothing survives a process restart.
"""
import time
from typing import Generic, TypeVar
from loguru import logger
from pydantic import BaseModel

from renovatepro import seed
from renovatepro.agents.generation import get_generation_client
from renovatepro.config import get_settings
from renovatepro.models.cms import CmsContent, CMS_SECTIONS
from renovatepro.models.material import Material
from renovatepro.models.plan import PricingPlan
from renovatepro.models.project import Project, ProjectSpace
from renovatepro.models.user import AdminUser, Contractor, Profile
from renovatepro.models.wizard import WizardMode
from renovatepro.wizard.session import GenerationService, WizardSession

T = TypeVar("T", bound=BaseModel)


class RecordNotFound(KeyError):
    """Lookup of an unknown record id."""


class Collection(Generic[T]):
    """Insertion-ordered collection of records keyed by their ``id``."""

    def __init__(self, name: str, records: list[T] | None = None):
        self.name = name
        self._records: dict[str, T] = {r.id: r for r in records or []}

    def __len__(self) -> int:
        return len(self._records)

    def all(self) -> list[T]:
        return list(self._records.values())

    def get(self, record_id: str) -> T:
        try:
            return self._records[record_id]
        except KeyError:
            raise RecordNotFound(f"{self.name} {record_id} not found") from None

    def add(self, record: T) -> T:
        self._records[record.id] = record
        logger.debug(f"{self.name} {record.id} added")
        return record

    def update(self, record_id: str, changes: dict) -> T:
        current = self.get(record_id)
        updated = current.model_copy(update={k: v for k, v in changes.items() if v is not None})
        self._records[record_id] = updated
        return updated

    def delete(self, record_id: str):
        self.get(record_id)
        del self._records[record_id]
        logger.debug(f"{self.name} {record_id} deleted")


class AppContext:
    def __init__(self, generation_service: GenerationService | None = None):
        materials = seed.default_materials()
        self.materials: Collection[Material] = Collection("Material", materials)
        self.projects: Collection[Project] = Collection("Project", seed.default_projects(materials))
        self.plans: Collection[PricingPlan] = Collection("Plan", seed.default_plans())
        self.contractors: Collection[Contractor] = Collection("Contractor", seed.default_contractors())
        self.admins: Collection[AdminUser] = Collection("Admin", seed.default_admins())
        self.job_tags: list[str] = list(seed.DEFAULT_JOB_TAGS)
        self.cms = CmsContent()
        self.contractor_profile: Profile = seed.default_contractor_profile()
        self.admin_profile: Profile = seed.default_admin_profile()
        self.sessions: dict[str, WizardSession] = {}
        self._generation_service = generation_service

    @property
    def generation_service(self) -> GenerationService:
        return self._generation_service or get_generation_client()

    # ── Job tags ──

    def add_job_tag(self, tag: str) -> list[str]:
        tag = tag.strip()
        if tag and tag not in self.job_tags:
            self.job_tags.append(tag)
        return self.job_tags

    def delete_job_tag(self, tag: str) -> list[str]:
        if tag not in self.job_tags:
            raise RecordNotFound(f"Job tag {tag} not found")
        self.job_tags.remove(tag)
        return self.job_tags

    # ── CMS ──

    def replace_cms(self, content: CmsContent) -> CmsContent:
        self.cms = content
        return self.cms

    def update_cms_section(self, section: str, payload: dict) -> CmsContent:
        if section not in CMS_SECTIONS:
            raise RecordNotFound(f"CMS section {section} not found")
        value = CMS_SECTIONS[section].model_validate(payload)
        self.cms = self.cms.model_copy(update={section: value})
        return self.cms

    # ── Projects ──

    def set_project_status(self, project_id: str, status: str) -> Project:
        if status not in self.job_tags:
            raise ValueError(f"Unknown status '{status}'")
        return self.projects.update(project_id, {"status": status})

    def save_space(self, project_id: str, space: ProjectSpace) -> Project:
        """Add a space to a project, or replace the space with the same id."""
        project = self.projects.get(project_id)
        spaces = list(project.spaces)
        for i, existing in enumerate(spaces):
            if existing.id == space.id:
                spaces[i] = space
                break
        else:
            spaces.append(space)
        return self.projects.update(project_id, {"spaces": spaces})

    # ── Wizard sessions ──

    def start_session(
        self,
        mode: WizardMode,
        project_id: str | None = None,
        space_id: str | None = None,
    ) -> WizardSession:
        mode = WizardMode(mode)
        initial_space = None
        if mode != WizardMode.NEW_PROJECT:
            if not project_id:
                raise ValueError(f"project_id is required for {mode.value}")
            project = self.projects.get(project_id)
            if mode == WizardMode.EDIT_SPACE:
                initial_space = next((s for s in project.spaces if s.id == space_id), None)
                if initial_space is None:
                    raise RecordNotFound(f"Space {space_id} not found")

        self.expire_sessions()
        session = WizardSession(
            mode,
            self.generation_service,
            project_id=project_id,
            initial_space=initial_space,
        )
        self.sessions[session.id] = session
        logger.info(f"Wizard {session.id} started ({mode.value})")
        return session

    def get_session(self, session_id: str) -> WizardSession:
        self.expire_sessions()
        try:
            session = self.sessions[session_id]
        except KeyError:
            raise RecordNotFound(f"Wizard session {session_id} not found") from None
        session.last_active = time.monotonic()
        return session

    def discard_session(self, session_id: str):
        self.sessions.pop(session_id, None)

    def expire_sessions(self, now: float | None = None) -> int:
        """Drop wizard sessions idle for longer than the configured TTL."""
        ttl = get_settings().wizard_session_ttl_seconds
        now = time.monotonic() if now is None else now
        expired = [sid for sid, s in self.sessions.items() if now - s.last_active > ttl]
        for sid in expired:
            self.sessions.pop(sid).cancel()
        if expired:
            logger.info(f"Expired {len(expired)} idle wizard session(s)")
        return len(expired)

    def finish_session(self, session_id: str) -> Project:
        """Finalize a wizard session, store its result and discard the session.

        If the store write fails (e.g. the target project was deleted), the
        session stays in the preview so the user can go back or cancel.
        """
        session = self.get_session(session_id)

        def persist(result: Project | ProjectSpace) -> Project:
            if isinstance(result, Project):
                return self.projects.add(result)
            return self.save_space(session.project_id, result)

        project = session.finalize(persist)
        self.discard_session(session_id)
        return project


_context: AppContext | None = None


def get_context() -> AppContext:
    """Get or create the process-wide application context."""
    global _context
    if _context is None:
        _context = AppContext()
    return _context


def reset_context(generation_service: GenerationService | None = None) -> AppContext:
    global _context
    _context = AppContext(generation_service)
    return _context
