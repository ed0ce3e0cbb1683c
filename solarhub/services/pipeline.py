"""
Sales pipeline service.
Owns Project.status: validates stage values and applies transitions.
"""
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Union

import structlog

from ..config import settings
from ..errors import InvalidStatus, TransitionNotAllowed
from ..models.enums import ProjectStatus
from ..models.models import Project
from .clock import Clock, resolve_clock

logger = structlog.get_logger(__name__)


# Board columns in progression order; cancelled is reachable from anywhere but has no column
PIPELINE_STAGES = [
    (ProjectStatus.LEAD, "Leads"),
    (ProjectStatus.PROPOSAL, "Proposal"),
    (ProjectStatus.NEGOTIATION, "Negotiation"),
    (ProjectStatus.APPROVED, "Approved"),
    (ProjectStatus.INSTALLATION, "Installation"),
    (ProjectStatus.COMPLETED, "Completed"),
]

STATUS_LABELS = dict(PIPELINE_STAGES)
STATUS_LABELS[ProjectStatus.CANCELLED] = "Cancelled"

TERMINAL_STATUSES = {ProjectStatus.COMPLETED, ProjectStatus.CANCELLED}

_STAGE_ORDER = {status: idx for idx, (status, _) in enumerate(PIPELINE_STAGES)}


def parse_status(value: Union[str, ProjectStatus, None]) -> ProjectStatus:
    """
    Coerce a raw value into a ProjectStatus.

    Raises:
        InvalidStatus: If value is not one of the seven stages
    """
    if isinstance(value, ProjectStatus):
        return value
    try:
        return ProjectStatus(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(s.value for s in ProjectStatus)
        raise InvalidStatus(f"Invalid status '{value}'. Must be one of: {valid}")


def is_terminal(status: Union[str, ProjectStatus]) -> bool:
    return parse_status(status) in TERMINAL_STATUSES


def is_forward(from_status: Union[str, ProjectStatus], to_status: Union[str, ProjectStatus]) -> bool:
    """
    True when to_status is later in the progression than from_status.

    Cancelling a non-terminal project counts as forward.
    """
    src = parse_status(from_status)
    dst = parse_status(to_status)
    if src in TERMINAL_STATUSES:
        return False
    if dst == ProjectStatus.CANCELLED:
        return True
    return _STAGE_ORDER[dst] > _STAGE_ORDER[src]


def check_transition(
    from_status: Union[str, ProjectStatus],
    to_status: Union[str, ProjectStatus],
    *,
    strict: Optional[bool] = None,
) -> None:
    """
    Validate a transition under the configured policy.

    The default policy is permissive: any stage may move to any stage,
    including backwards and out of completed/cancelled. With strict enabled,
    only forward moves are accepted.

    Raises:
        InvalidStatus: If either value is not a stage
        TransitionNotAllowed: If strict and the move is not forward
    """
    src = parse_status(from_status)
    dst = parse_status(to_status)
    if strict is None:
        strict = settings.pipeline_strict_transitions
    if not strict or src == dst:
        return
    if not is_forward(src, dst):
        raise TransitionNotAllowed(
            f"Cannot move project from '{src.value}' to '{dst.value}'"
        )


def request_transition(
    project: Project,
    new_status: Union[str, ProjectStatus],
    *,
    clock: Optional[Clock] = None,
    strict: Optional[bool] = None,
) -> bool:
    """
    Move a project to another pipeline stage.

    Only status and updated_at change. Nothing is committed: the caller
    persists and refreshes anything derived from stage counts.

    Args:
        project: Project to mutate in place
        new_status: Target stage (enum or its string value)
        clock: Source of the updated_at stamp
        strict: Override settings.pipeline_strict_transitions

    Returns:
        True if the status changed, False for a same-status no-op

    Raises:
        InvalidStatus: If new_status is not a stage (project untouched)
        TransitionNotAllowed: If the strict policy rejects the move
    """
    target = parse_status(new_status)
    current = parse_status(project.status)
    if target == current:
        return False

    check_transition(current, target, strict=strict)

    project.status = target
    project.updated_at = resolve_clock(clock).now()
    logger.info(
        "project_status_changed",
        project_id=project.id,
        from_status=current.value,
        to_status=target.value,
    )
    return True


def group_by_status(projects: Iterable[Project]) -> Dict[ProjectStatus, List[Project]]:
    """
    Pipeline board view: live (non-cancelled) projects grouped by stage.

    Every board column is present, even when empty. Within a column the
    projects keep the order they were given in.
    """
    board: Dict[ProjectStatus, List[Project]] = OrderedDict((status, []) for status, _ in PIPELINE_STAGES)
    for project in projects:
        status = parse_status(project.status)
        if status == ProjectStatus.CANCELLED:
            continue
        board[status].append(project)
    return board


def stage_counts(projects: Iterable[Project]) -> Dict[str, int]:
    """Number of live projects per board column, keyed by status value."""
    return {status.value: len(items) for status, items in group_by_status(projects).items()}
