"""
执行顺序示例

演示 promise 的几个常见行为，每个函数返回按发生顺序记录的事件列表:
- executor 同步执行，then 回调在当前同步代码结束后才执行
- then 中抛出的异常沿链传递，直到被失败回调或 catch 捕获
- catch 之后的 then 会继续执行
- then() 不传参数时值会穿透到后续回调
"""

from typing import List, Optional

from ..promise import Promise
from ..scheduler import TaskQueueScheduler


def execution_sequence(scheduler: Optional[TaskQueueScheduler] = None) -> List[str]:
    """executor 立即执行，回调延迟执行"""
    scheduler = scheduler or TaskQueueScheduler()
    events: List[str] = []

    def executor(resolve, reject):
        events.append("create a promise")
        resolve("成功了")

    p1 = Promise(executor, scheduler=scheduler)
    events.append("after new promise")

    def on_data(data):
        events.append(data)
        raise RuntimeError("失败了")

    p2 = p1.then(on_data)
    events.append("after p2.then")

    p2.then(
        lambda data: events.append(f"success {data}"),
        lambda err: events.append(f"failed {err}"),
    )

    scheduler.run_until_idle()
    return events


def error_chain(scheduler: Optional[TaskQueueScheduler] = None) -> List[str]:
    """失败回调中再次抛出的异常会被后续的 catch 捕获"""
    scheduler = scheduler or TaskQueueScheduler()
    events: List[str] = []

    def first_handler(err):
        events.append(f"捕获到错误1: {err}")
        raise RuntimeError("第二个错误")

    (
        Promise.reject("第一个错误", scheduler=scheduler)
        .then(None, first_handler)
        .catch(lambda err: events.append(f"在最后捕获错误: {err}"))
    )

    scheduler.run_until_idle()
    return events


def continue_after_catch(scheduler: Optional[TaskQueueScheduler] = None) -> List[str]:
    """catch 之后的 then 继续执行"""
    scheduler = scheduler or TaskQueueScheduler()
    events: List[str] = []

    def first(value):
        events.append(f"第一个值: {value}")
        raise RuntimeError("第二个错误")

    (
        Promise.resolve("第一个值", scheduler=scheduler)
        .then(first)
        .catch(lambda err: events.append(f"捕获到错误: {err}"))
        .then(lambda _: events.append("继续执行"))
    )

    scheduler.run_until_idle()
    return events


def value_penetration(scheduler: Optional[TaskQueueScheduler] = None) -> List[str]:
    """then() 缺省回调时，值穿透到下一个回调"""
    scheduler = scheduler or TaskQueueScheduler()
    events: List[str] = []

    Promise.resolve("穿透的值", scheduler=scheduler).then().then().then(events.append)

    scheduler.run_until_idle()
    return events
