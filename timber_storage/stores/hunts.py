"""
Hunt log and hunt plan store.

Logs are immutable once saved. Plans are completed by a log that
references them: saving such a log sets the plan's ``result_log_id``
and marks it COMPLETED.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from ..exceptions import RecordNotFoundError, TimberStorageError, ValidationError
from ..keys import (
    HUNT_LOGS_COLLECTION,
    HUNT_LOGS_KEY,
    HUNT_LOGS_MIGRATED_KEY,
    HUNT_LOGS_MIGRATION_PENDING_KEY,
    HUNT_PLANS_COLLECTION,
    HUNT_PLANS_KEY,
    HUNT_PLANS_MIGRATED_KEY,
    HUNT_PLANS_MIGRATION_PENDING_KEY,
)
from ..models import HuntLog, HuntPlan, PlanStatus, document_body, utc_now
from .base import RecordCollection, SyncedStore


class HuntStore(SyncedStore):
    name = "hunts"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.logs: RecordCollection[HuntLog] = RecordCollection(
            self,
            HuntLog,
            local_key=HUNT_LOGS_KEY,
            migrated_key=HUNT_LOGS_MIGRATED_KEY,
            pending_key=HUNT_LOGS_MIGRATION_PENDING_KEY,
            remote_name=HUNT_LOGS_COLLECTION,
            order_by="date",
            prepend=True,
        )
        self.plans: RecordCollection[HuntPlan] = RecordCollection(
            self,
            HuntPlan,
            local_key=HUNT_PLANS_KEY,
            migrated_key=HUNT_PLANS_MIGRATED_KEY,
            pending_key=HUNT_PLANS_MIGRATION_PENDING_KEY,
            remote_name=HUNT_PLANS_COLLECTION,
            order_by="date",
            prepend=True,
        )

    # =========================================================================
    # Loading
    # =========================================================================

    def _clear_state(self) -> None:
        self.logs.records = []
        self.plans.records = []

    def _load_local(self) -> None:
        self.logs.records = self.logs.read_local()
        self.plans.records = self.plans.read_local()

    async def _fetch_remote(self, user_id: str) -> tuple[list[HuntLog], list[HuntPlan]]:
        logs = await self.logs.fetch_remote(user_id)
        plans = await self.plans.fetch_remote(user_id)
        return logs, plans

    def _apply_remote(self, user_id: str, loaded: tuple[list[HuntLog], list[HuntPlan]]) -> None:
        self.logs.records, self.plans.records = loaded

    # =========================================================================
    # Hunt logs
    # =========================================================================

    @property
    def log_count(self) -> int:
        self._require_ready()
        return len(self.logs)

    def list_logs(self) -> list[HuntLog]:
        self._require_ready()
        return list(self.logs)

    def get_log(self, log_id: str) -> HuntLog | None:
        self._require_ready()
        return self.logs.find(log_id)

    async def add_log(self, log: HuntLog) -> HuntLog:
        """Save a hunt log, completing its plan if it references one.

        A plan_id that matches no plan is ignored. A plan that already has
        a result log keeps it.
        """
        self._require_ready()
        self.logs.insert(log)
        self.logs.save_local()

        completed = self._complete_plan(log)

        user_id = self._remote_user()
        if user_id is not None:
            self.sync.submit("huntLogs.create", self._create_log_remote(user_id, log, completed))
        await self._notify()
        return log

    def _complete_plan(self, log: HuntLog) -> HuntPlan | None:
        if not log.plan_id:
            return None
        plan = self.plans.find(log.plan_id)
        if plan is None:
            self.log.debug(f"Hunt log {log.id} references unknown plan {log.plan_id}")
            return None
        if plan.is_completed:
            self.log.warning(f"Plan {plan.id} already completed by log {plan.result_log_id}, leaving it unchanged")
            return None

        completed = plan.with_updates(
            {"status": PlanStatus.COMPLETED, "result_log_id": log.id, "updated_at": utc_now()}
        )
        self.plans.replace(completed)
        self.plans.save_local()
        return completed

    async def _create_log_remote(self, user_id: str, log: HuntLog, completed: HuntPlan | None) -> str:
        log_id = await self.logs.remote(user_id).create(document_body(log.to_dict()), document_id=log.id)
        if completed is None:
            return log_id
        try:
            await self.plans.remote(user_id).update(
                completed.id, completed.wire_fields(["status", "result_log_id"])
            )
        except TimberStorageError as e:
            self.log.warning(
                f"Hunt log {log_id} saved but plan {completed.id} was not marked completed remotely: {e.message}"
            )
        return log_id

    async def delete_log(self, log_id: str) -> None:
        """Delete a log. A plan it completed keeps its (now dangling) result_log_id."""
        self._require_ready()
        self.logs.require(log_id)
        self.logs.remove(log_id)
        self.logs.save_local()
        self.logs.submit("delete", lambda remote: remote.delete(log_id))
        await self._notify()

    async def clear_logs(self) -> None:
        self._require_ready()
        self.logs.records = []
        self.logs.save_local()
        self.logs.submit("delete_all", lambda remote: remote.delete_all())
        await self._notify()

    # =========================================================================
    # Hunt plans
    # =========================================================================

    def list_plans(self) -> list[HuntPlan]:
        self._require_ready()
        return list(self.plans)

    def get_plan(self, plan_id: str) -> HuntPlan | None:
        self._require_ready()
        return self.plans.find(plan_id)

    def result_log_for(self, plan: HuntPlan | str) -> HuntLog | None:
        """The log that completed ``plan``, or None if there is none or it was deleted."""
        self._require_ready()
        if isinstance(plan, str):
            plan = self.plans.require(plan)
        if plan.result_log_id is None:
            return None
        return self.logs.find(plan.result_log_id)

    async def add_plan(self, plan: HuntPlan) -> HuntPlan:
        self._require_ready()
        if not plan.title.strip():
            raise ValidationError("title", "must not be empty")
        self.plans.insert(plan)
        self.plans.save_local()
        body = document_body(plan.to_dict())
        self.plans.submit("create", lambda remote: remote.create(body, document_id=plan.id))
        await self._notify()
        return plan

    async def update_plan(self, plan_id: str, **fields: Any) -> HuntPlan:
        """Apply a partial update to a plan.

        ``result_log_id`` can be set only once, and setting it completes
        the plan. A completed plan cannot leave the COMPLETED status.
        """
        self._require_ready()
        current = self.plans.require(plan_id)
        fields = dict(fields)

        if "result_log_id" in fields:
            new_result = fields["result_log_id"]
            if current.result_log_id is not None and new_result != current.result_log_id:
                raise ValidationError("result_log_id", "already set", current.result_log_id)
            if new_result is not None:
                fields["status"] = PlanStatus.COMPLETED

        updated = current.with_updates({**fields, "updated_at": utc_now()})
        if updated.result_log_id is not None and updated.status is not PlanStatus.COMPLETED:
            raise ValidationError("status", "completed plans stay COMPLETED", updated.status.value)

        self.plans.replace(updated)
        self.plans.save_local()
        changes = updated.wire_fields(fields)
        self.plans.submit("update", lambda remote: remote.update(plan_id, changes))
        await self._notify()
        return updated

    async def toggle_gear_checked(self, plan_id: str, gear_id: str) -> HuntPlan:
        self._require_ready()
        plan = self.plans.require(plan_id)
        if not any(gear.id == gear_id for gear in plan.gear):
            raise RecordNotFoundError("planGear", gear_id)
        gear = [replace(g, checked=not g.checked) if g.id == gear_id else g for g in plan.gear]
        return await self.update_plan(plan_id, gear=gear)

    async def delete_plan(self, plan_id: str) -> None:
        self._require_ready()
        self.plans.require(plan_id)
        self.plans.remove(plan_id)
        self.plans.save_local()
        self.plans.submit("delete", lambda remote: remote.delete(plan_id))
        await self._notify()

    async def clear_plans(self) -> None:
        self._require_ready()
        self.plans.records = []
        self.plans.save_local()
        self.plans.submit("delete_all", lambda remote: remote.delete_all())
        await self._notify()
