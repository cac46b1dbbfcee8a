"""
Monitoring Job Reconciler - Create, read, update and delete NS1 monitoring
jobs from declared state.

Each operation awaits at most one call on the NS1 jobs service. Failures
are classified: a read of a job the server no longer knows about is a
normal outcome (the job is absent), anything else is raised as
ReconcileError.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import List, Optional

from models import DeclaredState, MonitoringJob
from ns1_client import NS1Client, NS1Error
from translator import TranslationError, to_domain, to_state

logger = logging.getLogger(__name__)

# NS1 has no structured not-found error for monitoring jobs, only this text.
NOT_FOUND_MARKER = "unknown monitoring job"

# Changing any of these forces the job to be replaced rather than updated.
FORCE_NEW_FIELDS = ("job_type",)

# Fields never compared when planning.
_UNCOMPARED_FIELDS = ("id", "region_scope")


class ReconcileError(Exception):
    """Raised when a remote operation fails for any reason but not-found."""

    def __init__(self, operation: str, job_id: str, cause: Exception):
        self.operation = operation
        self.job_id = job_id
        self.cause = cause
        target = f"monitoring job {job_id}" if job_id else "monitoring job"
        message = f"Failed to {operation} {target}: {cause}"
        body = getattr(cause, "body", "")
        if body:
            message = f"{message} (response: {body})"
        self.message = message
        super().__init__(message)


@dataclass
class DriftResult:
    """Difference between declared state and the job the server holds."""

    has_drift: bool = False
    drift_details: str = ""
    changed_fields: List[str] = field(default_factory=list)
    requires_replacement: bool = False


@dataclass
class ReconcileResult:
    """Result from an apply() call."""

    action: str = "none"
    message: str = ""
    state: Optional[DeclaredState] = None
    changed_fields: List[str] = field(default_factory=list)


class MonitoringJobReconciler:
    """
    Reconciles declared monitoring jobs against the NS1 API.

    Holds no state of its own beyond the client. Callers must serialize
    operations on the same job id.
    """

    def __init__(self, client: NS1Client):
        self.client = client

    def _to_state(self, job: MonitoringJob, operation: str) -> DeclaredState:
        try:
            return to_state(job)
        except TranslationError as e:
            logger.error(f"Cannot read back monitoring job {job.id}: {e.message}")
            raise ReconcileError(operation, job.id, e) from e

    async def create(self, state: DeclaredState) -> DeclaredState:
        """
        Create the job and return the state the server reports back.

        The returned state carries the generated id and any server-side
        defaults. The input state is left untouched when the call fails. If
        the job was created but its response cannot be read back, state.id
        is set to the new id before ReconcileError is raised.
        """
        job = to_domain(state)
        try:
            created = await self.client.jobs.create(job)
        except NS1Error as e:
            logger.error(f"Error creating monitoring job '{state.name}': {e}")
            raise ReconcileError("create", state.id, e) from e

        logger.info(f"Created monitoring job '{created.name}' ({created.id})")
        try:
            return self._to_state(created, "create")
        except ReconcileError:
            state.id = created.id
            raise

    async def read(self, state: DeclaredState) -> Optional[DeclaredState]:
        """
        Fetch the job tracked by state.id.

        Returns None and clears state.id when the server no longer knows
        the job, so the caller drops it from tracked state.
        """
        job_id = state.id
        try:
            job = await self.client.jobs.get(job_id)
        except NS1Error as e:
            if NOT_FOUND_MARKER in str(e):
                logger.debug(f"NS1 monitoring job ({job_id}) not found")
                state.id = ""
                return None
            logger.error(f"Error reading monitoring job {job_id}: {e}")
            raise ReconcileError("read", job_id, e) from e

        return self._to_state(job, "read")

    async def update(self, state: DeclaredState) -> DeclaredState:
        """Update the existing job in place; its id is never regenerated."""
        if not state.id:
            raise ValueError("Cannot update a monitoring job without an id")

        job = to_domain(state)
        job.id = state.id
        try:
            updated = await self.client.jobs.update(job)
        except NS1Error as e:
            logger.error(f"Error updating monitoring job {state.id}: {e}")
            raise ReconcileError("update", state.id, e) from e

        result = self._to_state(updated, "update")
        result.id = state.id
        logger.info(f"Updated monitoring job '{result.name}' ({result.id})")
        return result

    async def delete(self, state: DeclaredState) -> None:
        """
        Delete the job tracked by state.id.

        state.id is cleared whether or not the call succeeds; a failure is
        raised afterwards.
        """
        job_id = state.id
        try:
            await self.client.jobs.delete(job_id)
        except NS1Error as e:
            logger.error(f"Error deleting monitoring job {job_id}: {e}")
            raise ReconcileError("delete", job_id, e) from e
        finally:
            state.id = ""

        logger.info(f"Deleted monitoring job {job_id}")

    def plan(
        self, declared: DeclaredState, observed: Optional[DeclaredState]
    ) -> DriftResult:
        """
        Compare declared state with the observed job.

        Both sides are compared in their typed form, so "true" and "1" for
        ssl, or region lists in a different order, are not reported as
        drift. Undeclared optional fields compare as their zero value.
        """
        if observed is None:
            return DriftResult(
                has_drift=True,
                drift_details="Monitoring job does not exist",
            )

        want = to_domain(declared)
        have = to_domain(observed)

        changed = [
            f.name
            for f in fields(MonitoringJob)
            if f.name not in _UNCOMPARED_FIELDS
            and getattr(want, f.name) != getattr(have, f.name)
        ]
        if not changed:
            return DriftResult()

        return DriftResult(
            has_drift=True,
            drift_details=f"Changed fields: {', '.join(changed)}",
            changed_fields=changed,
            requires_replacement=any(name in FORCE_NEW_FIELDS for name in changed),
        )

    async def apply(self, declared: DeclaredState) -> ReconcileResult:
        """
        Drive the remote job towards the declared state.

        A job without an id, or one that has vanished remotely, is created.
        A job_type change deletes and recreates it; any other drift is an
        update. Errors propagate without compensating actions.
        """
        if not declared.id:
            state = await self.create(declared)
            return ReconcileResult(
                action="create",
                message=f"Created monitoring job {state.id}",
                state=state,
            )

        observed = await self.read(declared)
        if observed is None:
            logger.info(f"Monitoring job '{declared.name}' is gone, recreating it")
            state = await self.create(declared)
            return ReconcileResult(
                action="create",
                message=f"Created monitoring job {state.id}",
                state=state,
            )

        drift = self.plan(declared, observed)
        if not drift.has_drift:
            logger.info(f"No changes needed for monitoring job {observed.id}")
            return ReconcileResult(
                action="none",
                message="No changes",
                state=observed,
            )

        if drift.requires_replacement:
            old_id = declared.id
            logger.info(f"Replacing monitoring job {old_id}: {drift.drift_details}")
            await self.delete(declared)
            state = await self.create(declared)
            return ReconcileResult(
                action="replace",
                message=f"Replaced monitoring job {old_id} with {state.id}",
                state=state,
                changed_fields=drift.changed_fields,
            )

        state = await self.update(declared)
        return ReconcileResult(
            action="update",
            message=f"Updated monitoring job {state.id}",
            state=state,
            changed_fields=drift.changed_fields,
        )
