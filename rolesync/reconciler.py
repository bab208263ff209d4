"""
Role reconciler.

:func:`reconcile` converges one remote IAM role to the desired configuration
with the fewest remote calls, and :func:`remove` deletes it. Both run
sequentially and write recorded state only after every remote call in the
chosen path has succeeded, so a failed run leaves the previous state intact
and can simply be retried.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rolesync.base.async_support import AsyncMixin
from rolesync.base.config import (
    DEFAULT_REGION,
    DesiredConfig,
    RecordedState,
    default_policy,
    resolve_inputs,
)
from rolesync.base.exceptions import RolesyncError
from rolesync.base.policy import policies_equal
from rolesync.context import ComponentContext


def _as_desired(desired: DesiredConfig | Mapping[str, Any] | None) -> DesiredConfig:
    if isinstance(desired, DesiredConfig):
        return desired
    return DesiredConfig(**dict(desired or {}))


def reconcile(
    desired: DesiredConfig | Mapping[str, Any] | None,
    ctx: ComponentContext,
) -> dict[str, Any]:
    """Create, update or replace the role so it matches *desired*.

    Steps:
        1. Resolve inputs from *desired*, the recorded state and defaults.
        2. Fetch the live role. Missing: create it. Present: adopt its ARN,
           update the trust policy if the service principal differs, and
           swap the policy (remove then add) if the policy differs.
        3. If the recorded role had another name, delete it using its
           recorded policy. This happens after the new role is in place.
        4. Save the new recorded state.

    Running it twice with the same *desired* makes no remote changes the
    second time.

    Args:
        desired: Desired configuration (model or plain mapping).
        ctx: Invocation context.

    Returns:
        ``{name, arn, service, policy}`` of the deployed role.

    Raises:
        pydantic.ValidationError: If *desired* is malformed.
        IAMError: If a remote call fails. Recorded state is left unchanged.
    """
    log = ctx.logger
    desired = _as_desired(desired)
    recorded = ctx.state.load()
    inputs = resolve_inputs(desired, recorded)
    log.begin()
    log.bind(role=inputs.name, region=inputs.region)

    log.status("Deploying")
    iam = ctx.client(inputs.region)

    try:
        log.debug(f"Syncing role {inputs.name} in region {inputs.region}.")
        remote = iam.get_role(inputs.name)

        if remote is None:
            log.status("Creating")
            log.debug(f"Creating role {inputs.name}.")
            arn = iam.create_role(inputs.name, inputs.service, inputs.policy)
            log.debug(f"Done: {arn}")
        else:
            arn = remote.arn
            service_changed = not policies_equal(remote.service, inputs.service)
            policy_changed = not policies_equal(remote.policy, inputs.policy)

            if service_changed or policy_changed:
                log.status("Updating")
            if service_changed:
                log.debug(f"Updating service for role {inputs.name}.")
                iam.update_assume_role_policy(inputs.name, inputs.service)
            if policy_changed:
                log.debug(f"Updating policy for role {inputs.name}.")
                iam.remove_role_policy(
                    inputs.name, remote.policy, policy_name=remote.policy_name
                )
                iam.add_role_policy(inputs.name, inputs.policy)

        if recorded.name and recorded.name != inputs.name:
            log.status("Replacing")
            log.debug(f"Deleting replaced role {recorded.name}.")
            iam.delete_role(recorded.name, recorded.policy or default_policy())
    except RolesyncError:
        log.error(f"Deploying role {inputs.name} failed.")
        raise

    state = RecordedState(
        name=inputs.name,
        arn=arn,
        service=inputs.service,
        policy=inputs.policy,
        region=inputs.region,
    )
    ctx.state.save(state)
    log.debug(f"Saved state for role {inputs.name}.")
    log.debug(f"Role {inputs.name} was successfully deployed to region {inputs.region}.")
    log.debug(f"Deployed role arn is {arn}.")

    return state.outputs()


def remove(ctx: ComponentContext) -> dict[str, Any] | None:
    """Delete the recorded role and clear recorded state.

    Does nothing when no role name is recorded, so calling it twice is safe.

    Args:
        ctx: Invocation context.

    Returns:
        The outputs as they were before deletion, or ``None`` if there
        was nothing to remove.

    Raises:
        IAMError: If deletion fails. Recorded state is left unchanged.
    """
    log = ctx.logger
    recorded = ctx.state.load()
    log.begin()
    log.status("Removing")

    if recorded.is_empty:
        log.debug("Aborting removal. Role name not found in state.")
        return None

    region = recorded.region or DEFAULT_REGION
    log.bind(role=recorded.name, region=region)
    iam = ctx.client(region)

    log.debug(f"Removing role {recorded.name} from region {region}.")
    try:
        iam.delete_role(recorded.name, recorded.policy or default_policy())
    except RolesyncError:
        log.error(f"Removing role {recorded.name} failed.")
        raise
    log.debug(f"Role {recorded.name} successfully removed from region {region}.")

    outputs = recorded.outputs()
    ctx.state.save(RecordedState())
    return outputs


class RoleComponent(AsyncMixin):
    """Deploy/remove entry points bound to one context.

    Example::

        component = RoleComponent(ComponentContext(state=JSONFileStateStore("role.json")))
        outputs = component.deploy(service="lambda.amazonaws.com")
        await component.aremove()
    """

    async_methods = ("deploy", "remove")

    def __init__(self, ctx: ComponentContext | None = None) -> None:
        self.ctx = ctx or ComponentContext()

    def deploy(self, **inputs: Any) -> dict[str, Any]:
        return reconcile(DesiredConfig(**inputs), self.ctx)

    def remove(self) -> dict[str, Any] | None:
        return remove(self.ctx)
