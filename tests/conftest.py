"""共享 fixture：每个测试使用独立的确定性任务队列"""

import pytest

from imitate_promise import TaskQueueScheduler, use_scheduler


@pytest.fixture
def scheduler():
    queue = TaskQueueScheduler()
    with use_scheduler(queue):
        yield queue


@pytest.fixture
def drain(scheduler):
    """执行所有已安排的回调，包括排空过程中新加入的回调"""

    def _drain():
        return scheduler.run_until_idle()

    return _drain
