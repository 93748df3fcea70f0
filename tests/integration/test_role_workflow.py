"""多角色端到端流程

注册 -> 创建 -> 列表可见性 -> 状态推进 -> 删除规则 -> 角色变更即时生效
"""

from datetime import UTC, datetime

from httpx import AsyncClient
from tasktrack.core.models import Role
from tasktrack.core.store import atomic


class TestRoleWorkflow:
    async def test_full_lifecycle(self, client: AsyncClient, sign_up_as):
        alice_id, alice = await sign_up_as("Alice")
        _, bob = await sign_up_as("Bob")
        _, manager = await sign_up_as("Morgan", Role.MANAGER)
        _, admin = await sign_up_as("Ada", Role.ADMIN)

        # 1. 普通用户创建任务；manager 不能创建
        resp = await client.post(
            "/api/tasks", json={"title": "Quarterly report"}, headers=alice
        )
        assert resp.status_code == 201
        task_id = resp.json()["id"]
        assert resp.json()["owner_id"] == alice_id

        resp = await client.post("/api/tasks", json={"title": "Nope"}, headers=manager)
        assert resp.status_code == 403

        # 2. 可见性：bob 看不到，manager/admin 能看到
        assert (await client.get("/api/tasks", headers=bob)).json()["tasks"] == []
        for headers in (manager, admin):
            ids = [t["id"] for t in (await client.get("/api/tasks", headers=headers)).json()["tasks"]]
            assert ids == [task_id]
        assert (await client.get(f"/api/tasks/{task_id}", headers=bob)).status_code == 403

        # 3. 只有所有者能推进状态
        resp = await client.patch(
            f"/api/tasks/{task_id}", json={"status": "in_progress"}, headers=manager
        )
        assert resp.status_code == 403
        resp = await client.patch(
            f"/api/tasks/{task_id}", json={"status": "in_progress"}, headers=alice
        )
        assert resp.json()["status"] == "in_progress"

        # 4. 非 draft 状态下所有者不能删除，manager 永远不能删除
        assert (await client.delete(f"/api/tasks/{task_id}", headers=alice)).status_code == 403
        assert (await client.delete(f"/api/tasks/{task_id}", headers=manager)).status_code == 403

        # 5. admin 可删除任意状态的任务
        resp = await client.delete(f"/api/tasks/{task_id}", headers=admin)
        assert resp.json() == {"success": True}
        assert (await client.get(f"/api/tasks/{task_id}", headers=alice)).status_code == 404

    async def test_promotion_takes_effect_without_new_session(
        self, client: AsyncClient, sign_up_as, integration_app
    ):
        owner_id, owner = await sign_up_as("Owner")
        carol_id, carol = await sign_up_as("Carol")
        resp = await client.post("/api/tasks", json={"title": "Private"}, headers=owner)
        task_id = resp.json()["id"]

        assert (await client.get(f"/api/tasks/{task_id}", headers=carol)).status_code == 403

        store_group = integration_app.state.store_group
        async with atomic(store_group.conn):
            await store_group.user_store.set_role(carol_id, Role.ADMIN, datetime.now(UTC))

        resp = await client.get(f"/api/tasks/{task_id}", headers=carol)
        assert resp.status_code == 200
        assert resp.json()["owner_id"] == owner_id

    async def test_lifespan_wires_strict_policy(self, client: AsyncClient):
        resp = await client.get("/ready")
        assert resp.status_code == 200
        assert resp.json()["checks"]["policy_variant"] == "strict"
