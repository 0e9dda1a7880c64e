from __future__ import annotations

from typing import List, Optional

from .models import GoogleTask, TaskFilter


def _task_text_fields(task: GoogleTask) -> List[str]:
    return [
        task.title.lower(),
        (task.notes or "").lower(),
        (task.list_title or "").lower(),
    ]


def matches_filter(task: GoogleTask, task_filter: Optional[TaskFilter]) -> bool:
    """
    태스크가 필터 조건을 만족하는지 검사
    - search_text: 공백으로 나눈 검색어, "-"로 시작하면 제외어
    - 제목, 메모, 목록 이름에서 대소문자 구분 없이 검색
    """
    if task_filter is None:
        return True

    if task_filter.list_ids is not None:
        if task.list_id not in task_filter.list_ids:
            return False

    if task_filter.has_due_date is not None:
        if task_filter.has_due_date != bool(task.due):
            return False

    if task_filter.hide_container_tasks and task.has_subtasks:
        return False

    if task_filter.starred_only and not task.starred:
        return False

    if task_filter.search_text:
        fields = _task_text_fields(task)
        for term in task_filter.search_text.lower().split():
            if term.startswith("-") and len(term) > 1:
                if any(term[1:] in field for field in fields):
                    return False
            elif not any(term in field for field in fields):
                return False

    return True


def apply_task_filter(tasks: List[GoogleTask],
                      task_filter: Optional[TaskFilter]) -> List[GoogleTask]:
    return [task for task in tasks if matches_filter(task, task_filter)]
