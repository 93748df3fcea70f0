"""授权策略单元测试

测试内容：
1. list 过滤范围
2. create / update / delete 在 STRICT 配置下的判定表
3. PERMISSIVE 配置与 STRICT 的差异
4. enforce 抛出 ForbiddenError，evaluate 分派
"""

from datetime import UTC, datetime

import pytest
from tasktrack.core.errors import ForbiddenError
from tasktrack.core.models import Action, Actor, PolicyVariant, Role, Task, TaskStatus
from tasktrack.core.policy import (
    DENY_CREATE,
    DENY_DELETE,
    DENY_UPDATE,
    TaskPolicy,
    sees_all_tasks,
)

NOW = datetime(2026, 1, 1, tzinfo=UTC)


def _actor(user_id: str = "u1", role: Role = Role.USER) -> Actor:
    return Actor(user_id=user_id, role=role)


def _task(owner_id: str = "u1", status: TaskStatus = TaskStatus.DRAFT, task_id: int = 5) -> Task:
    return Task(
        id=task_id,
        title="Write report",
        owner_id=owner_id,
        status=status,
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.fixture
def strict() -> TaskPolicy:
    return TaskPolicy(PolicyVariant.STRICT)


@pytest.fixture
def permissive() -> TaskPolicy:
    return TaskPolicy(PolicyVariant.PERMISSIVE)


class TestListScope:
    @pytest.mark.parametrize("role", [Role.MANAGER, Role.ADMIN])
    def test_oversight_roles_see_everything(self, strict: TaskPolicy, role: Role):
        actor = _actor("boss", role)
        assert sees_all_tasks(actor) is True
        assert strict.list_owner_filter(actor) is None

    def test_user_is_filtered_to_own_tasks(self, strict: TaskPolicy):
        actor = _actor("u1", Role.USER)
        assert sees_all_tasks(actor) is False
        assert strict.list_owner_filter(actor) == "u1"

    def test_list_is_never_denied(self, strict: TaskPolicy):
        assert strict.evaluate(_actor(), Action.LIST).allowed is True


class TestCreate:
    def test_user_may_create(self, strict: TaskPolicy):
        assert strict.can_create(_actor(role=Role.USER)).allowed is True

    @pytest.mark.parametrize("role", [Role.MANAGER, Role.ADMIN])
    def test_strict_denies_oversight_roles(self, strict: TaskPolicy, role: Role):
        decision = strict.can_create(_actor(role=role))
        assert decision.allowed is False
        assert decision.reason == DENY_CREATE

    @pytest.mark.parametrize("role", list(Role))
    def test_permissive_allows_any_role(self, permissive: TaskPolicy, role: Role):
        assert permissive.can_create(_actor(role=role)).allowed is True


class TestUpdate:
    def test_owner_user_may_update(self, strict: TaskPolicy):
        assert strict.can_update(_actor("u1"), _task("u1")).allowed is True

    @pytest.mark.parametrize("status", list(TaskStatus))
    def test_owner_user_may_update_in_any_status(self, strict: TaskPolicy, status: TaskStatus):
        assert strict.can_update(_actor("u1"), _task("u1", status)).allowed is True

    @pytest.mark.parametrize(
        "actor",
        [
            _actor("u2", Role.USER),
            _actor("m1", Role.MANAGER),
            _actor("a1", Role.ADMIN),
            # 角色不是 user 时即使是所有者也不允许
            _actor("u1", Role.MANAGER),
            _actor("u1", Role.ADMIN),
        ],
    )
    def test_everyone_else_is_denied(self, strict: TaskPolicy, actor: Actor):
        decision = strict.can_update(actor, _task("u1"))
        assert decision.allowed is False
        assert decision.reason == DENY_UPDATE

    def test_permissive_has_same_update_rule(self, permissive: TaskPolicy):
        assert permissive.can_update(_actor("a1", Role.ADMIN), _task("u1")).allowed is False
        assert permissive.can_update(_actor("u1"), _task("u1")).allowed is True


class TestDeleteStrict:
    @pytest.mark.parametrize("status", list(TaskStatus))
    @pytest.mark.parametrize("owner_id", ["a1", "someone-else"])
    def test_admin_may_delete_anything(self, strict: TaskPolicy, status, owner_id):
        decision = strict.can_delete(_actor("a1", Role.ADMIN), _task(owner_id, status))
        assert decision.allowed is True

    def test_owner_user_may_delete_draft(self, strict: TaskPolicy):
        assert strict.can_delete(_actor("u1"), _task("u1", TaskStatus.DRAFT)).allowed is True

    @pytest.mark.parametrize("status", [TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED])
    def test_owner_user_may_not_delete_started_work(self, strict: TaskPolicy, status):
        decision = strict.can_delete(_actor("u1"), _task("u1", status))
        assert decision.allowed is False
        assert decision.reason == DENY_DELETE

    def test_non_owner_user_may_not_delete_draft(self, strict: TaskPolicy):
        assert strict.can_delete(_actor("u2"), _task("u1")).allowed is False

    @pytest.mark.parametrize("status", list(TaskStatus))
    @pytest.mark.parametrize("owner_id", ["m1", "u1"])
    def test_manager_never_deletes(self, strict: TaskPolicy, status, owner_id):
        decision = strict.can_delete(_actor("m1", Role.MANAGER), _task(owner_id, status))
        assert decision.allowed is False


class TestDeletePermissive:
    def test_owning_manager_may_delete_own_draft(self, permissive: TaskPolicy):
        manager = _actor("m1", Role.MANAGER)
        assert permissive.can_delete(manager, _task("m1", TaskStatus.DRAFT)).allowed is True

    def test_owning_manager_may_not_delete_started_work(self, permissive: TaskPolicy):
        manager = _actor("m1", Role.MANAGER)
        task = _task("m1", TaskStatus.IN_PROGRESS)
        assert permissive.can_delete(manager, task).allowed is False

    def test_manager_may_not_delete_others_draft(self, permissive: TaskPolicy):
        manager = _actor("m1", Role.MANAGER)
        assert permissive.can_delete(manager, _task("u1")).allowed is False


class TestReadAndPermissions:
    def test_read_rules(self, strict: TaskPolicy):
        task = _task("u1")
        assert strict.can_read(_actor("u1"), task).allowed is True
        assert strict.can_read(_actor("m1", Role.MANAGER), task).allowed is True
        assert strict.can_read(_actor("u2"), task).allowed is False

    def test_permissions_for_owner_draft(self, strict: TaskPolicy):
        assert strict.permissions_for(_actor("u1"), _task("u1")) == {
            "update": True,
            "delete": True,
        }

    def test_permissions_for_admin(self, strict: TaskPolicy):
        task = _task("u1", TaskStatus.COMPLETED)
        assert strict.permissions_for(_actor("a1", Role.ADMIN), task) == {
            "update": False,
            "delete": True,
        }


class TestEnforce:
    def test_enforce_raises_forbidden_with_reason(self, strict: TaskPolicy):
        with pytest.raises(ForbiddenError) as exc_info:
            strict.enforce(_actor("m1", Role.MANAGER), Action.CREATE)
        assert exc_info.value.reason == DENY_CREATE
        assert exc_info.value.action == "create"
        assert exc_info.value.status_code == 403

    def test_enforce_returns_decision_when_allowed(self, strict: TaskPolicy):
        decision = strict.enforce(_actor("u1"), Action.DELETE, _task("u1"))
        assert decision.allowed is True
        assert bool(decision) is True

    def test_target_required_for_task_actions(self, strict: TaskPolicy):
        with pytest.raises(ValueError):
            strict.evaluate(_actor(), Action.UPDATE)

    def test_default_variant_is_strict(self):
        assert TaskPolicy().variant == PolicyVariant.STRICT

    def test_variant_accepts_string(self):
        assert TaskPolicy("permissive").variant == PolicyVariant.PERMISSIVE
