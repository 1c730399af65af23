# tests/test_todo_service.py
from __future__ import annotations

import sqlite3
from datetime import date

import pytest

from tasktree.errors import MaxDepthExceededError, NotFoundError, ValidationError
from tasktree.models.patches import TodoCreate, TodoFilter, TodoPatch


# --- standalone ---------------------------------------------------------------

def test_create_standalone_todo(todos):
    t = todos.create(TodoCreate(title="Groceries"))
    assert t.project_id is None
    assert t.parent_id is None
    assert t.level == "task"
    assert t.priority == 3
    assert t.status == "pending"


def test_list_standalone_excludes_project_todos(projects, todos):
    p = projects.create_project("P")
    todos.create(TodoCreate(title="alone"))
    todos.create(TodoCreate(title="in project", project_id=p.id))

    res = todos.list_standalone()
    assert res.total_count == 1
    assert res.todos[0].title == "alone"


def test_list_standalone_status_filter(todos):
    a = todos.create(TodoCreate(title="a"))
    todos.create(TodoCreate(title="b"))
    todos.update_status(a.id, "completed")
    assert [t.title for t in todos.list_standalone("completed")] == ["a"]
    assert [t.title for t in todos.list_standalone("pending")] == ["b"]


# --- hierarchy ------------------------------------------------------------------

def test_task_in_project(projects, todos):
    p = projects.create_project("P")
    t = todos.create(TodoCreate(title="Design", project_id=p.id))
    assert t.project_id == p.id
    assert t.level == "task"


def test_subtask_inherits_parent_project(projects, todos):
    p = projects.create_project("P")
    other = projects.create_project("Other")
    task = todos.create(TodoCreate(title="Design", project_id=p.id))
    sub = todos.create(TodoCreate(title="Wireframe", parent_id=task.id, project_id=other.id))
    assert sub.level == "subtask"
    assert sub.parent_id == task.id
    assert sub.project_id == p.id


def test_subtask_of_standalone_task_has_no_project(projects, todos):
    other = projects.create_project("Other")
    task = todos.create(TodoCreate(title="loose"))
    sub = todos.create(TodoCreate(title="child", parent_id=task.id, project_id=other.id))
    assert sub.project_id is None


def test_child_of_subtask_is_rejected(projects, todos):
    p = projects.create_project("P")
    task = todos.create(TodoCreate(title="task", project_id=p.id))
    sub = todos.create(TodoCreate(title="sub", parent_id=task.id))
    with pytest.raises(MaxDepthExceededError) as ei:
        todos.create(TodoCreate(title="subsub", parent_id=sub.id))
    assert ei.value.kind == "max_depth_exceeded"
    assert todos.list_todos(TodoFilter(parent_id=sub.id)).total_count == 0


def test_create_under_missing_parent(todos):
    with pytest.raises(NotFoundError) as ei:
        todos.create(TodoCreate(title="orphan", parent_id=123))
    assert ei.value.entity == "todo"


@pytest.mark.parametrize("priority", [0, 6, -1, "2", True])
def test_create_rejects_bad_priority(todos, priority):
    with pytest.raises(ValidationError) as ei:
        todos.create(TodoCreate(title="x", priority=priority))
    assert ei.value.field == "priority"


def test_create_rejects_empty_title(todos):
    with pytest.raises(ValidationError):
        todos.create(TodoCreate(title=""))


def test_create_with_missing_project_propagates_store_error(todos):
    with pytest.raises(sqlite3.IntegrityError):
        todos.create(TodoCreate(title="x", project_id=77))


def test_create_accepts_date_due(todos):
    t = todos.create(TodoCreate(title="x", due_date=date(2026, 3, 1)))
    assert t.due_date == "2026-03-01"


def test_todo_create_from_mapping():
    data = TodoCreate.from_mapping({"title": "x", "priority": 1, "parent_id": 4})
    assert (data.title, data.priority, data.parent_id) == ("x", 1, 4)
    with pytest.raises(ValidationError):
        TodoCreate.from_mapping({"priority": 1})
    with pytest.raises(ValidationError):
        TodoCreate.from_mapping({"title": "x", "level": "subtask"})


def test_get_missing_todo(todos):
    with pytest.raises(NotFoundError):
        todos.get(1)


def test_project_tree(projects, todos):
    p = projects.create_project("P")
    t1 = todos.create(TodoCreate(title="Task1", project_id=p.id, priority=1))
    t2 = todos.create(TodoCreate(title="Task2", project_id=p.id, priority=2))
    todos.create(TodoCreate(title="Sub1-2", parent_id=t1.id, priority=4))
    todos.create(TodoCreate(title="Sub1-1", parent_id=t1.id, priority=2))
    todos.create(TodoCreate(title="Sub2-1", parent_id=t2.id))

    tree = todos.get_project_tree(p.id)
    assert [n.title for n in tree] == ["Task1", "Task2"]
    assert [s.title for s in tree[0].subtasks] == ["Sub1-1", "Sub1-2"]
    assert [s.title for s in tree[1].subtasks] == ["Sub2-1"]
    assert all(s.level == "subtask" for n in tree for s in n.subtasks)


def test_project_tree_of_unknown_project_is_empty(todos):
    assert todos.get_project_tree(404) == []


# --- listing ----------------------------------------------------------------------

def test_list_orders_by_priority_then_due_date_nulls_last(todos):
    todos.create(TodoCreate(title="p3-none", priority=3))
    todos.create(TodoCreate(title="p3-late", priority=3, due_date="2026-09-01"))
    todos.create(TodoCreate(title="p1-none", priority=1))
    todos.create(TodoCreate(title="p3-early", priority=3, due_date="2026-01-01"))
    todos.create(TodoCreate(title="p1-dated", priority=1, due_date="2026-12-31"))

    titles = [t.title for t in todos.list_todos().todos]
    assert titles == ["p1-dated", "p1-none", "p3-early", "p3-late", "p3-none"]


def test_list_filters_combine(projects, todos):
    p = projects.create_project("P")
    task = todos.create(TodoCreate(title="task", project_id=p.id))
    s1 = todos.create(TodoCreate(title="s1", parent_id=task.id))
    todos.create(TodoCreate(title="s2", parent_id=task.id))
    todos.create(TodoCreate(title="elsewhere"))
    todos.update_status(s1.id, "completed")

    top = todos.list_todos(TodoFilter(project_id=p.id, parent_id=None))
    assert [t.title for t in top] == ["task"]
    assert len(top) == 1

    subs = todos.list_todos(TodoFilter(parent_id=task.id))
    assert {t.title for t in subs} == {"s1", "s2"}

    done_subs = todos.list_todos(TodoFilter(project_id=p.id, level="subtask", status="completed"))
    assert [t.title for t in done_subs] == ["s1"]

    assert todos.list_todos(TodoFilter(level="task")).total_count == 2


def test_list_rejects_unknown_filter_values(todos):
    with pytest.raises(ValidationError):
        todos.list_todos(TodoFilter(status="done"))
    with pytest.raises(ValidationError):
        todos.list_todos(TodoFilter(level="epic"))


# --- create_many ------------------------------------------------------------------

def test_create_many_subtasks(projects, todos):
    p = projects.create_project("P")
    task = todos.create(TodoCreate(title="Design", project_id=p.id))

    subs = todos.create_many([
        TodoCreate(title="Wireframe", parent_id=task.id),
        TodoCreate(title="Mockups", parent_id=task.id, priority=1),
        TodoCreate(title="Feedback", parent_id=task.id, due_date="2026-03-01"),
    ])

    assert [s.title for s in subs] == ["Wireframe", "Mockups", "Feedback"]
    assert all(s.level == "subtask" for s in subs)
    assert all(s.project_id == p.id for s in subs)


def test_create_many_failure_keeps_earlier_items(todos):
    with pytest.raises(ValidationError):
        todos.create_many([
            TodoCreate(title="first"),
            TodoCreate(title="bad", priority=9),
            TodoCreate(title="never"),
        ])
    assert [t.title for t in todos.list_todos()] == ["first"]


def test_create_many_atomic_rolls_back(todos):
    task = todos.create(TodoCreate(title="task"))
    sub = todos.create(TodoCreate(title="sub", parent_id=task.id))
    with pytest.raises(MaxDepthExceededError):
        todos.create_many(
            [TodoCreate(title="ok", parent_id=task.id), TodoCreate(title="too deep", parent_id=sub.id)],
            atomic=True,
        )
    assert {t.title for t in todos.list_todos()} == {"task", "sub"}


def test_create_many_atomic_commits_on_success(todos):
    created = todos.create_many([TodoCreate(title="a"), TodoCreate(title="b")], atomic=True)
    assert [t.id for t in created] == [1, 2]
    assert todos.list_todos().total_count == 2


# --- update -----------------------------------------------------------------------

def test_update_applies_only_supplied_fields(todos):
    t = todos.create(TodoCreate(title="x", description="keep", priority=2, due_date="2026-02-02"))
    u = todos.update(t.id, TodoPatch(title="y", due_date=None))
    assert u.title == "y"
    assert u.description == "keep"
    assert u.priority == 2
    assert u.due_date is None


def test_update_refreshes_timestamp(todos, db_conn):
    t = todos.create(TodoCreate(title="x"))
    db_conn.execute("UPDATE todos SET updated_at = '2000-01-01 00:00:00' WHERE id = ?", (t.id,))
    assert todos.update(t.id, TodoPatch()).updated_at != "2000-01-01 00:00:00"


def test_update_missing_todo(todos):
    with pytest.raises(NotFoundError):
        todos.update(5, TodoPatch(title="x"))


def test_update_rejects_bad_priority(todos):
    t = todos.create(TodoCreate(title="x"))
    with pytest.raises(ValidationError):
        todos.update(t.id, TodoPatch(priority=0))
    assert todos.get(t.id).priority == 3


def test_update_status_toggles(todos):
    t = todos.create(TodoCreate(title="x"))
    assert todos.update_status(t.id, "completed").status == "completed"
    assert todos.update_status(t.id, "pending").status == "pending"
    with pytest.raises(ValidationError):
        todos.update_status(t.id, "done")


def test_update_reparent_under_task_inherits_project(projects, todos):
    p = projects.create_project("P")
    task = todos.create(TodoCreate(title="task", project_id=p.id))
    loose = todos.create(TodoCreate(title="loose"))

    moved = todos.update(loose.id, TodoPatch(parent_id=task.id, project_id=None))
    assert moved.level == "subtask"
    assert moved.parent_id == task.id
    assert moved.project_id == p.id


def test_update_reparent_under_subtask_is_rejected(todos):
    task = todos.create(TodoCreate(title="task"))
    sub = todos.create(TodoCreate(title="sub", parent_id=task.id))
    other = todos.create(TodoCreate(title="other"))
    with pytest.raises(MaxDepthExceededError):
        todos.update(other.id, TodoPatch(parent_id=sub.id))
    assert todos.get(other.id).level == "task"


def test_update_task_with_children_cannot_become_subtask(todos):
    a = todos.create(TodoCreate(title="a"))
    todos.create(TodoCreate(title="a1", parent_id=a.id))
    b = todos.create(TodoCreate(title="b"))
    with pytest.raises(MaxDepthExceededError):
        todos.update(a.id, TodoPatch(parent_id=b.id))


def test_update_cannot_parent_itself(todos):
    a = todos.create(TodoCreate(title="a"))
    with pytest.raises(ValidationError):
        todos.update(a.id, TodoPatch(parent_id=a.id))


def test_update_detach_subtask_makes_it_a_task(projects, todos):
    p = projects.create_project("P")
    task = todos.create(TodoCreate(title="task", project_id=p.id))
    sub = todos.create(TodoCreate(title="sub", parent_id=task.id))

    detached = todos.update(sub.id, TodoPatch(parent_id=None))
    assert detached.level == "task"
    assert detached.parent_id is None
    assert detached.project_id == p.id


def test_update_subtask_project_cannot_diverge(projects, todos):
    p = projects.create_project("P")
    other = projects.create_project("Other")
    task = todos.create(TodoCreate(title="task", project_id=p.id))
    sub = todos.create(TodoCreate(title="sub", parent_id=task.id))
    with pytest.raises(ValidationError) as ei:
        todos.update(sub.id, TodoPatch(project_id=other.id))
    assert ei.value.field == "project_id"
    assert todos.get(sub.id).project_id == p.id


def test_update_task_project_moves_subtasks(projects, todos):
    p = projects.create_project("P")
    other = projects.create_project("Other")
    task = todos.create(TodoCreate(title="task", project_id=p.id))
    sub = todos.create(TodoCreate(title="sub", parent_id=task.id))

    todos.update(task.id, TodoPatch(project_id=other.id))
    assert todos.get(sub.id).project_id == other.id
    assert projects.get_project(p.id).total_tasks == 0
    assert projects.get_project(other.id).total_tasks == 2


def test_todo_patch_from_mapping():
    patch = TodoPatch.from_mapping({"status": "completed", "due_date": None})
    assert patch.to_payload() == {"status": "completed", "due_date": None}
    with pytest.raises(ValidationError):
        TodoPatch.from_mapping({"level": "subtask"})


# --- delete -----------------------------------------------------------------------

def test_delete_task_cascades_to_subtasks(projects, todos):
    p = projects.create_project("P")
    task = todos.create(TodoCreate(title="task", project_id=p.id))
    todos.create(TodoCreate(title="s1", parent_id=task.id))
    todos.create(TodoCreate(title="s2", parent_id=task.id))

    confirmation = todos.delete(task.id)
    assert confirmation.id == task.id
    assert confirmation.success is True
    assert todos.list_todos(TodoFilter(project_id=p.id)).total_count == 0


def test_delete_subtask_leaves_parent(todos):
    task = todos.create(TodoCreate(title="task"))
    sub = todos.create(TodoCreate(title="sub", parent_id=task.id))
    todos.delete(sub.id)
    assert todos.get(task.id).title == "task"


def test_delete_missing_todo(todos):
    with pytest.raises(NotFoundError):
        todos.delete(8)


# --- serialization ------------------------------------------------------------------

def test_tree_and_errors_serialize(projects, todos):
    p = projects.create_project("P")
    task = todos.create(TodoCreate(title="task", project_id=p.id))
    todos.create(TodoCreate(title="sub", parent_id=task.id))

    (node,) = todos.get_project_tree(p.id)
    data = node.to_dict()
    assert data["title"] == "task"
    assert data["subtasks"][0]["title"] == "sub"
    assert data["subtasks"][0]["level"] == "subtask"

    with pytest.raises(NotFoundError) as ei:
        todos.get(999)
    assert ei.value.to_dict() == {"kind": "not_found", "message": "Todo not found (id: 999)"}
