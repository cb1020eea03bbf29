from fastapi import Depends, HTTPException

from conference_api.models.conference import Conference
from conference_api.utils.auth import get_current_user

SCHEDULING_ROLES = ("organizer", "admin")


def is_admin(user) -> bool:
    return getattr(user, "role", None) == "admin"


def require_organizer(user=Depends(get_current_user)):
    if getattr(user, "role", None) not in SCHEDULING_ROLES:
        raise HTTPException(status_code=403, detail="Organizer or admin only")
    return user


def owning_conference(presentation, fallback_section=None) -> Conference | None:
    """Conference a presentation belongs to: its own, else its section's, else the fallback's."""
    if presentation.conference is not None:
        return presentation.conference
    if presentation.section is not None:
        return presentation.section.conference
    if fallback_section is not None:
        return fallback_section.conference
    return None


def can_manage_conference(user, conference: Conference | None) -> bool:
    """Admins manage everything, organizers only what they created."""
    if is_admin(user):
        return True
    return conference is not None and conference.created_by_id == user.id


def require_conference_manager(user, conference: Conference | None, action: str):
    if not can_manage_conference(user, conference):
        raise HTTPException(status_code=403, detail=f"Not authorized to {action}")
