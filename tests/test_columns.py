"""Tests for Kanban column derivation and per-column pagination."""

import pytest
from datetime import datetime
from pydantic import ValidationError

from studioboard.engine.columns import (
    BoardPagination,
    ColumnPagination,
    derive_board,
    derive_column,
    page_count,
)
from studioboard.models.task import BOARD_STATUSES, TaskPriority, TaskStatus


class TestPageCount:
    def test_exact_multiple(self):
        assert page_count(20, 10) == 2

    def test_partial_last_page(self):
        assert page_count(12, 10) == 2

    def test_empty_column_has_one_page(self):
        assert page_count(0, 10) == 1

    def test_non_positive_page_size_raises(self):
        with pytest.raises(ValueError):
            page_count(5, 0)


class TestColumnPagination:
    def test_defaults(self):
        pagination = ColumnPagination()
        assert pagination.page == 1
        assert pagination.items_per_page == 10

    def test_rejects_unknown_page_size(self):
        with pytest.raises(ValidationError):
            ColumnPagination(items_per_page=7)

    def test_rejects_page_zero(self):
        with pytest.raises(ValidationError):
            ColumnPagination(page=0)


class TestDeriveColumn:
    def test_filters_by_status(self, make_task):
        tasks = [
            make_task(status=TaskStatus.TODO),
            make_task(status=TaskStatus.REVIEW),
            make_task(status=TaskStatus.TODO),
        ]

        view = derive_column(tasks, TaskStatus.TODO)

        assert view.total_count == 2
        assert all(task.status == TaskStatus.TODO for task in view.tasks)

    def test_sorts_by_priority_then_due_date(self, make_task):
        low = make_task(priority=TaskPriority.LOW, due_date=datetime(2026, 1, 1))
        high_late = make_task(priority=TaskPriority.HIGH, due_date=datetime(2026, 5, 1))
        high_early = make_task(priority=TaskPriority.HIGH, due_date=datetime(2026, 4, 1))
        urgent_undated = make_task(priority=TaskPriority.URGENT)

        view = derive_column([low, high_late, high_early, urgent_undated], "todo")

        assert [t.id for t in view.tasks] == [urgent_undated.id, high_early.id, high_late.id, low.id]

    def test_undated_after_dated_within_priority(self, make_task):
        undated = make_task(priority=TaskPriority.MEDIUM)
        dated = make_task(priority=TaskPriority.MEDIUM, due_date=datetime(2026, 6, 1))

        view = derive_column([undated, dated], TaskStatus.TODO)

        assert [t.id for t in view.tasks] == [dated.id, undated.id]

    def test_undated_keep_cache_order(self, make_task):
        first = make_task()
        second = make_task()
        third = make_task()

        view = derive_column([first, second, third], TaskStatus.TODO)

        assert [t.id for t in view.tasks] == [first.id, second.id, third.id]

    def test_twelve_tasks_paginate_ten_then_two(self, make_task):
        tasks = [make_task() for _ in range(12)]

        page_one = derive_column(tasks, TaskStatus.TODO, ColumnPagination(page=1))
        page_two = derive_column(tasks, TaskStatus.TODO, ColumnPagination(page=2))

        assert len(page_one.tasks) == 10
        assert len(page_two.tasks) == 2
        assert page_one.total_pages == 2
        assert page_two.current_page == 2
        assert {t.id for t in page_one.tasks}.isdisjoint({t.id for t in page_two.tasks})

    def test_page_beyond_last_is_clamped(self, make_task):
        tasks = [make_task() for _ in range(3)]

        view = derive_column(tasks, TaskStatus.TODO, ColumnPagination(page=4, items_per_page=5))

        assert view.current_page == 1
        assert len(view.tasks) == 3

    def test_empty_column(self):
        view = derive_column([], TaskStatus.ACCEPTED)

        assert view.tasks == []
        assert view.total_count == 0
        assert view.total_pages == 1
        assert view.current_page == 1

    def test_idempotent(self, make_task):
        tasks = [make_task(priority=p) for p in (TaskPriority.LOW, TaskPriority.URGENT, TaskPriority.HIGH)]
        pagination = ColumnPagination(items_per_page=5)

        assert derive_column(tasks, "todo", pagination) == derive_column(tasks, "todo", pagination)


class TestBoardPagination:
    def test_has_every_board_column(self):
        pagination = BoardPagination()
        assert set(pagination.as_dict()) == set(BOARD_STATUSES)

    def test_unknown_column_raises(self):
        pagination = BoardPagination()
        with pytest.raises(ValueError):
            pagination.get(TaskStatus.CANCELLED)
        with pytest.raises(ValueError):
            pagination.set_page("archived", 2)

    def test_set_items_per_page_resets_only_that_column(self):
        pagination = BoardPagination()
        pagination.set_page(TaskStatus.TODO, 3)
        pagination.set_page(TaskStatus.REVIEW, 2)

        pagination.set_items_per_page(TaskStatus.TODO, 20)

        assert pagination.get(TaskStatus.TODO) == ColumnPagination(page=1, items_per_page=20)
        assert pagination.get(TaskStatus.REVIEW).page == 2
        assert pagination.get(TaskStatus.REVIEW).items_per_page == 10

    def test_set_page_keeps_page_size(self):
        pagination = BoardPagination()
        pagination.set_items_per_page("in-progress", 5)

        pagination.set_page("in-progress", 2)

        assert pagination.get(TaskStatus.IN_PROGRESS) == ColumnPagination(page=2, items_per_page=5)

    def test_reset_all_keeps_page_sizes(self):
        pagination = BoardPagination()
        pagination.set_items_per_page(TaskStatus.COMPLETED, 50)
        pagination.set_page(TaskStatus.COMPLETED, 3)
        pagination.set_page(TaskStatus.TODO, 2)

        pagination.reset_all()

        assert all(column.page == 1 for column in pagination.as_dict().values())
        assert pagination.get(TaskStatus.COMPLETED).items_per_page == 50


class TestDeriveBoard:
    def test_every_column_present(self, make_task):
        tasks = [make_task(status=TaskStatus.REVIEW), make_task(status=TaskStatus.CANCELLED)]

        board = derive_board(tasks, BoardPagination())

        assert set(board) == set(BOARD_STATUSES)
        assert board[TaskStatus.REVIEW].total_count == 1
        # Cancelled tasks have no column
        assert sum(view.total_count for view in board.values()) == 1


class TestMissingPriority:
    """Tasks without a recognized priority weigh 0 and sort last."""

    def test_no_priority_sorts_after_low(self, make_task):
        unset = make_task(priority=None)
        low = make_task(priority=TaskPriority.LOW)

        view = derive_column([unset, low], TaskStatus.TODO)

        assert [t.id for t in view.tasks] == [low.id, unset.id]

    def test_unrecognized_priority_sorts_after_low(self, make_task):
        unknown = make_task(priority="critical")
        low = make_task(priority="low")

        view = derive_column([unknown, low], TaskStatus.TODO)

        assert [t.id for t in view.tasks] == [low.id, unknown.id]
        assert view.tasks[1].priority == "critical"
