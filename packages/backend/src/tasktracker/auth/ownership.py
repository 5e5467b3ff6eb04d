"""Ownership rules for projects and tasks.

Learn: One rule covers every resource: a principal may act on a resource
iff the resource's owner id equals principal.user_id. Projects store
owner_id directly; tasks resolve it through their parent project.

How the rule is applied depends on the operation:

- Read one resource by id: fetch it with its resolved owner, then
  require_found (404 if absent) and require_owner (403 if someone else's).
  This path reveals that an id exists. Nothing is written, so the gap
  between check and use is harmless.
- Update/delete: the ownership predicate goes into the statement's WHERE
  clause (owned_project_ids / project_owned_by). Zero affected rows means
  "absent or not yours", reported as 403 without saying which. Check and
  act happen in one statement.
- List: the query itself is scoped by owner, so rows belonging to other
  users are never fetched.
"""

from typing import Optional, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.sql.elements import ColumnElement

from tasktracker.auth.dependencies import Principal
from tasktracker.db.models import Project, Task
from tasktracker.errors import ResourceKind, ResourceNotFound, ResourceUnauthorized

T = TypeVar("T")


def require_found(resource: Optional[T], kind: ResourceKind) -> T:
    if resource is None:
        raise ResourceNotFound(kind)
    return resource


def is_owner(principal: Principal, owner_id: int) -> bool:
    return owner_id == principal.user_id


def require_owner(principal: Principal, owner_id: int, kind: ResourceKind) -> None:
    if not is_owner(principal, owner_id):
        raise ResourceUnauthorized(kind)


def project_owned_by(principal: Principal) -> ColumnElement[bool]:
    """WHERE fragment matching projects the principal owns."""
    return Project.owner_id == principal.user_id


def owned_project_ids(principal: Principal) -> Select:
    """Subquery of project ids the principal owns (for task predicates)."""
    return select(Project.id).where(project_owned_by(principal))


def task_owned_by(principal: Principal) -> ColumnElement[bool]:
    """WHERE fragment matching tasks under projects the principal owns."""
    return Task.project_id.in_(owned_project_ids(principal))


def task_with_owner(task_id: int) -> Select:
    """Select (Task, owner_id) for one task, resolving the owner by join."""
    return (
        select(Task, Project.owner_id)
        .join(Project, Task.project_id == Project.id)
        .where(Task.id == task_id)
    )
