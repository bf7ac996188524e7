"""Tests for the client-side task cache."""

from unittest.mock import MagicMock

from studioboard.board.cache import TaskCache
from studioboard.integrations.tasks_api import TaskFilter, TasksApiClient, TasksTransportError
from studioboard.models.task import TaskStatus


def _response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


class TestRefresh:
    def test_replaces_contents(self, mock_client, admin_actor, notifier, make_task):
        tasks = [make_task(), make_task()]
        mock_client.fetch_all.return_value = tasks
        cache = TaskCache(mock_client, admin_actor, notifier)

        assert cache.refresh() is True
        assert [t.id for t in cache.tasks] == [t.id for t in tasks]
        assert cache.loading is False

    def test_admin_filter_is_not_scoped(self, mock_client, admin_actor, notifier):
        cache = TaskCache(mock_client, admin_actor, notifier)

        cache.refresh(TaskFilter(status="review"))

        sent = mock_client.fetch_all.call_args.args[0]
        assert sent.assigned_user_id is None
        assert sent.status == "review"

    def test_user_filter_is_scoped_to_self(self, mock_client, user_actor, notifier):
        cache = TaskCache(mock_client, user_actor, notifier)

        cache.refresh(TaskFilter(assigned_user_id="someone-else"))

        sent = mock_client.fetch_all.call_args.args[0]
        assert sent.assigned_user_id == user_actor.user_id

    def test_failure_keeps_previous_contents(self, mock_client, admin_actor, notifier, make_task):
        cache = TaskCache(mock_client, admin_actor, notifier)
        mock_client.fetch_all.return_value = [make_task()]
        cache.refresh()

        mock_client.fetch_all.side_effect = TasksTransportError("down")

        assert cache.refresh() is False
        assert len(cache.tasks) == 1
        assert cache.loading is False
        assert notifier.pending[-1].message == "Failed to load tasks"
        assert notifier.pending[-1].level == "error"

    def test_refresh_while_loading_is_ignored(self, mock_client, admin_actor, notifier):
        cache = TaskCache(mock_client, admin_actor, notifier)
        cache.loading = True

        assert cache.refresh() is False
        mock_client.fetch_all.assert_not_called()


class TestLocalPatches:
    def test_apply_returns_snapshot(self, mock_client, admin_actor, notifier, sample_task):
        cache = TaskCache(mock_client, admin_actor, notifier)
        mock_client.fetch_all.return_value = [sample_task]
        cache.refresh()

        snapshot = cache.apply(sample_task.id, {"status": TaskStatus.REVIEW.value})

        assert snapshot.status == TaskStatus.TODO
        assert cache.get(sample_task.id).status == TaskStatus.REVIEW

        cache.restore(snapshot)
        assert cache.get(sample_task.id).status == TaskStatus.TODO

    def test_apply_unknown_task(self, mock_client, admin_actor, notifier):
        cache = TaskCache(mock_client, admin_actor, notifier)
        assert cache.apply("missing", {"status": "review"}) is None

    def test_remove_and_clear(self, mock_client, admin_actor, notifier, make_task):
        first, second = make_task(), make_task()
        mock_client.fetch_all.return_value = [first, second]
        cache = TaskCache(mock_client, admin_actor, notifier)
        cache.refresh()

        cache.remove(first.id)
        assert [t.id for t in cache.tasks] == [second.id]

        cache.clear()
        assert cache.tasks == []

    def test_tasks_returns_a_copy(self, mock_client, admin_actor, notifier, sample_task):
        mock_client.fetch_all.return_value = [sample_task]
        cache = TaskCache(mock_client, admin_actor, notifier)
        cache.refresh()

        cache.tasks.clear()

        assert len(cache.tasks) == 1


class TestMalformedPayload:
    """A bad record from the backend must not escape refresh()."""

    def _client(self, payloads):
        session = MagicMock()
        session.request.side_effect = [_response(payload) for payload in payloads]
        return TasksApiClient(base_url="http://tasks.test", session=session, max_workers=1)

    def test_bad_record_keeps_previous_contents(self, admin_actor, notifier):
        good = {"success": True, "data": [{"_id": "a", "title": "Cut", "status": "todo"}], "pagination": {"totalPages": 1}}
        bad = {"success": True, "data": [{"_id": "b", "status": "todo"}], "pagination": {"totalPages": 1}}
        cache = TaskCache(self._client([good, bad]), admin_actor, notifier)
        assert cache.refresh() is True

        assert cache.refresh() is False

        assert [t.id for t in cache.tasks] == ["a"]
        assert cache.loading is False
        assert notifier.pending[-1].level == "error"
        assert notifier.pending[-1].message == "Failed to load tasks"

    def test_unknown_priority_loads(self, admin_actor, notifier):
        payload = {
            "success": True,
            "data": [{"_id": "a", "title": "Cut", "status": "todo", "priority": "critical"}],
            "pagination": {"totalPages": 1},
        }
        cache = TaskCache(self._client([payload]), admin_actor, notifier)

        assert cache.refresh() is True
        assert cache.get("a").priority == "critical"
        assert notifier.pending == []
