"""
Promise 解析过程「规范 Promise/A+ 2.3」

根据 then 回调的返回值 x 决定如何敲定目标 promise:
- x 与目标 promise 是同一对象: 以 ChainingCycleError 失败
- x 带有可调用的 then 成员（本库的 Promise 或任意 thenable）: 递归解析其结果
- 其他值: 直接成功
"""

from __future__ import annotations

import inspect
from typing import Any

from .common import logger
from .interfaces import RejectFn, ResolveFn
from .types import ChainingCycleError

# 不可能带有 then 成员的值，直接视为普通值
_PRIMITIVE_TYPES = (bool, int, float, complex, str, bytes)
_MISSING = object()


def resolve_promise(promise: Any, x: Any, resolve: ResolveFn, reject: RejectFn) -> None:
    """用 x 敲定 promise，resolve/reject 为 promise 自身的敲定入口"""

    if x is promise:
        reject(ChainingCycleError())
        return

    if x is None or isinstance(x, _PRIMITIVE_TYPES):
        resolve(x)
        return

    # 不规范的 thenable 可能多次调用回调（或同时调用 resolve 和 reject），只有第一次生效
    called = False

    try:
        then = x.then
    except AttributeError as exc:
        # 成员存在但读取失败（如 property 内部抛出 AttributeError）同样视为失败
        if inspect.getattr_static(x, "then", _MISSING) is _MISSING:
            resolve(x)
        else:
            reject(exc)
        return
    except Exception as exc:
        reject(exc)
        return

    if not callable(then):
        resolve(x)
        return

    def on_y(y: Any) -> None:
        nonlocal called
        if called:
            return
        called = True
        # y 可能仍是 thenable，继续递归解析
        resolve_promise(promise, y, resolve, reject)

    def on_r(r: Any) -> None:
        nonlocal called
        if called:
            return
        called = True
        reject(r)

    try:
        then(on_y, on_r)
    except Exception as exc:
        if called:
            logger.debug(f"忽略 thenable 在敲定后抛出的异常: {exc!r}")
            return
        called = True
        reject(exc)
