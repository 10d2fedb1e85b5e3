"""
End-to-end tests for the goal tracker commands running through the
default pipeline (with caching enabled).
"""

from typing import Any, Dict
from unittest.mock import AsyncMock, patch

import pytest

from src.commands.executor.command_executor import CommandExecutor
from src.commands.impl.view_goal_command import ViewGoalCommand
from src.commands.interfaces.command_result import ErrorCategory
from src.core.storage.interface import StorageInterface


async def create_goal(
    executor: CommandExecutor, token: str, title: str = "Run a marathon", **fields: Any
) -> Dict[str, Any]:
    context, result = await executor.execute_command(
        "create_goal", {"title": title, **fields}, auth_token=token
    )
    assert result.is_success(), context.response.body
    return result.data


class TestSignUp:
    @pytest.mark.asyncio
    async def test_sign_up_issues_token(self, member, token_registry) -> None:
        """Signing up issues a token that resolves to the new user"""
        assert member["username"] == "alice"
        assert member["role"] == "member"
        resolved = token_registry.resolve(member["token"])
        assert resolved.user_id == member["user_id"]

    @pytest.mark.asyncio
    async def test_duplicate_username(self, executor: CommandExecutor, member) -> None:
        """Test that usernames are unique"""
        context, result = await executor.execute_command("sign_up", {"username": "alice"})

        assert result.error_category == ErrorCategory.VALIDATION
        assert context.response.status_code == 422
        assert context.errors.rules_for("username") == ["unique"]

    @pytest.mark.asyncio
    async def test_invalid_username_reports_every_rule(self, executor: CommandExecutor) -> None:
        """Every failing rule is reported for a field"""
        context, _ = await executor.execute_command("sign_up", {"username": "A!"})

        assert context.errors.rules_for("username") == ["length", "format"]
        body = context.response.body
        assert body["error"] == "validation_failed"
        assert body["errors"]["username"][1] == {
            "rule": "format",
            "message": "may only contain lowercase letters, digits and underscores",
        }

    @pytest.mark.asyncio
    async def test_missing_username(self, executor: CommandExecutor) -> None:
        """Test that a username is required"""
        context, _ = await executor.execute_command("sign_up", {})
        assert context.errors.rules_for("username") == ["presence"]


class TestCreateGoal:
    @pytest.mark.asyncio
    async def test_create_goal(self, executor: CommandExecutor, member) -> None:
        """Goals are owned by the caller and ignore a supplied owner_id"""
        context, result = await executor.execute_command(
            "create_goal",
            {"title": "  Read 20 books ", "description": "One a month", "owner_id": 999},
            auth_token=member["token"],
        )

        assert context.response.status_code == 200
        goal = result.data
        assert goal["title"] == "Read 20 books"
        assert goal["owner_id"] == member["user_id"]
        assert goal["description"] == "One a month"
        assert "owner_id" not in context.fields

    @pytest.mark.asyncio
    async def test_requires_login_before_validation(self, executor: CommandExecutor) -> None:
        """Authorization runs before validation"""
        context, result = await executor.execute_command("create_goal", {})

        assert result.error_category == ErrorCategory.UNAUTHORIZED
        assert context.response.status_code == 401
        assert context.errors.is_empty()

    @pytest.mark.asyncio
    async def test_all_errors_reported_together(self, executor: CommandExecutor, member) -> None:
        """Errors from every field come back in one response"""
        context, _ = await executor.execute_command(
            "create_goal",
            {"title": "ab", "description": "x" * 1001, "url": "ftp://example.com"},
            auth_token=member["token"],
        )

        assert context.response.status_code == 422
        errors = context.response.body["errors"]
        assert set(errors) == {"title", "description", "url"}
        assert errors["title"][0]["rule"] == "length"
        assert errors["description"][0]["rule"] == "length"
        assert errors["url"][0]["rule"] == "uri"
        assert context.has_result() is False

    @pytest.mark.asyncio
    async def test_title_unique_per_owner(
        self, executor: CommandExecutor, member, other_member
    ) -> None:
        """Titles are unique per owner, case-insensitively"""
        await create_goal(executor, member["token"], "Learn Rust")

        context, _ = await executor.execute_command(
            "create_goal", {"title": "learn rust"}, auth_token=member["token"]
        )
        assert context.errors.rules_for("title") == ["unique"]

        await create_goal(executor, other_member["token"], "Learn Rust")

    @pytest.mark.asyncio
    async def test_non_string_fields_are_validation_errors(
        self, executor: CommandExecutor, member
    ) -> None:
        """Raw non-string values are rejected before any lookup or execution"""
        context, result = await executor.execute_command(
            "create_goal",
            {"title": 12345, "description": 7, "url": 8},
            auth_token=member["token"],
        )

        assert result.error_category == ErrorCategory.VALIDATION
        assert context.response.status_code == 422
        assert context.errors.rules_for("title") == ["length"]
        assert context.errors.rules_for("description") == ["length"]
        assert context.errors.rules_for("url") == ["uri"]

    @pytest.mark.asyncio
    async def test_non_string_update_title(self, executor: CommandExecutor, member) -> None:
        """Updating a title to a number fails validation"""
        goal = await create_goal(executor, member["token"])
        context, _ = await executor.execute_command(
            "update_goal", {"id": goal["id"], "title": 12345}, auth_token=member["token"]
        )

        assert context.response.status_code == 422
        assert context.errors.rules_for("title") == ["length"]


class TestDeleteGoal:
    @pytest.mark.asyncio
    async def test_delete_owned_goal_returns_no_content(
        self, executor: CommandExecutor, memory_storage: StorageInterface, member
    ) -> None:
        """Deleting an owned goal gives 204 with no body"""
        await memory_storage.save_json({"value": 41}, "sequences/goals.json")
        goal = await create_goal(executor, member["token"])
        assert goal["id"] == 42

        context, result = await executor.execute_command(
            "delete_goal", {"id": 42}, auth_token=member["token"]
        )

        assert result.is_success()
        assert context.has_result() is True
        assert context.result is None
        assert context.response.status_code == 204
        assert context.response.body is None

        context, _ = await executor.execute_command(
            "view_goal", {"id": 42}, auth_token=member["token"]
        )
        assert context.response.status_code == 422

    @pytest.mark.asyncio
    async def test_delete_missing_goal(self, executor: CommandExecutor, member) -> None:
        """Deleting an unknown goal is a validation error"""
        context, result = await executor.execute_command(
            "delete_goal", {"id": 999}, auth_token=member["token"]
        )

        assert result.error_category == ErrorCategory.VALIDATION
        assert context.response.status_code == 422
        assert "exists" in context.errors.rules_for("id")

    @pytest.mark.asyncio
    async def test_delete_requires_integer_id(self, executor: CommandExecutor, member) -> None:
        """Test that goal ids must be integers"""
        context, _ = await executor.execute_command(
            "delete_goal", {"id": "abc"}, auth_token=member["token"]
        )
        assert context.errors.rules_for("id") == ["integer", "exists"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw_id", ["--5", "²", "9" * 5000], ids=["double-dash", "superscript", "huge"]
    )
    async def test_malformed_id_is_a_validation_error(
        self, executor: CommandExecutor, member, raw_id: str
    ) -> None:
        """Ids int() cannot parse are reported per field, never as a 500"""
        for command_name in ("delete_goal", "view_goal"):
            context, result = await executor.execute_command(
                command_name, {"id": raw_id}, auth_token=member["token"]
            )

            assert result.error_category == ErrorCategory.VALIDATION
            assert context.response.status_code == 422
            assert context.errors.rules_for("id") == ["integer", "exists"]

    @pytest.mark.asyncio
    async def test_delete_someone_elses_goal(
        self, executor: CommandExecutor, member, other_member
    ) -> None:
        """Test that only the owner can delete a goal"""
        goal = await create_goal(executor, member["token"])

        context, result = await executor.execute_command(
            "delete_goal", {"id": goal["id"]}, auth_token=other_member["token"]
        )

        assert result.error_category == ErrorCategory.FORBIDDEN
        assert context.response.status_code == 403


class TestViewGoal:
    @pytest.mark.asyncio
    async def test_view_without_token_never_executes(
        self, executor: CommandExecutor, member
    ) -> None:
        """An anonymous view is refused before execution"""
        goal = await create_goal(executor, member["token"])

        with patch.object(ViewGoalCommand, "execute", new_callable=AsyncMock) as execute:
            context, _ = await executor.execute_command("view_goal", {"id": goal["id"]})

        assert context.response.status_code == 401
        execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_view_is_idempotent_and_cached(
        self, executor: CommandExecutor, member
    ) -> None:
        """Repeated views return the same payload from cache"""
        goal = await create_goal(executor, member["token"])

        first, _ = await executor.execute_command(
            "view_goal", {"id": goal["id"]}, auth_token=member["token"]
        )
        second, _ = await executor.execute_command(
            "view_goal", {"id": goal["id"]}, auth_token=member["token"]
        )

        assert first.response.status_code == second.response.status_code == 200
        assert first.response.body == second.response.body == goal
        assert first.get_metadata("cache") == "miss"
        assert second.get_metadata("cache") == "hit"

    @pytest.mark.asyncio
    async def test_health_check_keeps_cached_view(
        self, executor: CommandExecutor, member
    ) -> None:
        """Only goal writes invalidate cached reads"""
        goal = await create_goal(executor, member["token"])
        await executor.execute_command(
            "view_goal", {"id": goal["id"]}, auth_token=member["token"]
        )

        _, health = await executor.execute_command("health_check")
        assert health.is_success()

        context, _ = await executor.execute_command(
            "view_goal", {"id": goal["id"]}, auth_token=member["token"]
        )
        assert context.get_metadata("cache") == "hit"

    @pytest.mark.asyncio
    async def test_cache_hit_does_not_bypass_ownership(
        self, executor: CommandExecutor, member, other_member
    ) -> None:
        """Cached goals are still guarded by ownership"""
        goal = await create_goal(executor, member["token"])
        await executor.execute_command(
            "view_goal", {"id": goal["id"]}, auth_token=member["token"]
        )

        context, _ = await executor.execute_command(
            "view_goal", {"id": goal["id"]}, auth_token=other_member["token"]
        )
        assert context.response.status_code == 403


class TestUpdateGoal:
    @pytest.mark.asyncio
    async def test_update_invalidates_cached_view(
        self, executor: CommandExecutor, member
    ) -> None:
        """Updates are visible to the next view"""
        goal = await create_goal(executor, member["token"])
        await executor.execute_command(
            "view_goal", {"id": goal["id"]}, auth_token=member["token"]
        )

        context, result = await executor.execute_command(
            "update_goal",
            {"id": str(goal["id"]), "title": "Run a half marathon"},
            auth_token=member["token"],
        )
        assert context.response.status_code == 200
        assert result.data["title"] == "Run a half marathon"

        context, _ = await executor.execute_command(
            "view_goal", {"id": goal["id"]}, auth_token=member["token"]
        )
        assert context.response.body["title"] == "Run a half marathon"

    @pytest.mark.asyncio
    async def test_keeping_own_title_is_not_a_clash(
        self, executor: CommandExecutor, member
    ) -> None:
        """A goal's own title does not count as taken"""
        goal = await create_goal(executor, member["token"], "Swim")
        context, _ = await executor.execute_command(
            "update_goal",
            {"id": goal["id"], "title": "Swim", "description": "Twice a week"},
            auth_token=member["token"],
        )
        assert context.response.status_code == 200

    @pytest.mark.asyncio
    async def test_update_requires_a_change(self, executor: CommandExecutor, member) -> None:
        """Test that an update must change something"""
        goal = await create_goal(executor, member["token"])
        context, _ = await executor.execute_command(
            "update_goal", {"id": goal["id"]}, auth_token=member["token"]
        )

        assert context.response.status_code == 422
        assert context.errors.rules_for("base") == ["changes"]

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, executor: CommandExecutor, member) -> None:
        """Test that a title cannot be blanked"""
        goal = await create_goal(executor, member["token"])
        context, _ = await executor.execute_command(
            "update_goal", {"id": goal["id"], "title": "  "}, auth_token=member["token"]
        )
        assert context.errors.rules_for("title") == ["presence"]


class TestAttachGoalImage:
    @pytest.mark.asyncio
    async def test_attach_image(self, executor: CommandExecutor, member) -> None:
        """Attaching an image stores the URL and normalized type"""
        goal = await create_goal(executor, member["token"])

        context, result = await executor.execute_command(
            "attach_goal_image",
            {
                "id": goal["id"],
                "image_url": "https://img.example.com/banner.png",
                "content_type": "Image/PNG",
            },
            auth_token=member["token"],
        )

        assert context.response.status_code == 200
        assert result.data["image_url"] == "https://img.example.com/banner.png"
        assert result.data["image_content_type"] == "image/png"

    @pytest.mark.asyncio
    async def test_rejects_unsupported_type(self, executor: CommandExecutor, member) -> None:
        """Test that non-image types and bad URLs are rejected"""
        goal = await create_goal(executor, member["token"])

        context, _ = await executor.execute_command(
            "attach_goal_image",
            {"id": goal["id"], "image_url": "not a url", "content_type": "text/html"},
            auth_token=member["token"],
        )

        assert context.response.status_code == 422
        assert context.errors.rules_for("image_url") == ["uri"]
        assert context.errors.rules_for("content_type") == ["content_type"]


class TestListGoals:
    @pytest.mark.asyncio
    async def test_lists_only_own_goals(
        self, executor: CommandExecutor, member, other_member
    ) -> None:
        """Members only see their own goals"""
        await create_goal(executor, member["token"], "Run")
        await create_goal(executor, other_member["token"], "Swim")

        context, result = await executor.execute_command(
            "list_goals", auth_token=member["token"]
        )

        assert context.response.status_code == 200
        assert result.data["count"] == 1
        assert result.data["goals"][0]["title"] == "Run"

    @pytest.mark.asyncio
    async def test_list_refreshes_after_create(self, executor: CommandExecutor, member) -> None:
        """Creating a goal refreshes the cached list"""
        _, result = await executor.execute_command("list_goals", auth_token=member["token"])
        assert result.data["count"] == 0

        await create_goal(executor, member["token"], "Run")

        _, result = await executor.execute_command("list_goals", auth_token=member["token"])
        assert result.data["count"] == 1

    @pytest.mark.asyncio
    async def test_list_all_requires_admin(
        self, executor: CommandExecutor, member, other_member, admin_token: str
    ) -> None:
        """Listing every goal is admin only"""
        await create_goal(executor, member["token"], "Run")
        await create_goal(executor, other_member["token"], "Swim")

        context, _ = await executor.execute_command(
            "list_all_goals", auth_token=member["token"]
        )
        assert context.response.status_code == 403

        context, result = await executor.execute_command(
            "list_all_goals", auth_token=admin_token
        )
        assert context.response.status_code == 200
        assert result.data["count"] == 2
