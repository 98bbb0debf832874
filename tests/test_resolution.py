"""
解析过程 resolve_promise 测试（直接驱动，不经过 then）
"""

import logging

import pytest

from imitate_promise import Promise, ChainingCycleError, defer, resolve_promise


class Recorder:
    """记录 resolve/reject 调用的替身"""

    def __init__(self):
        self.calls = []

    def resolve(self, value):
        self.calls.append(("resolve", value))

    def reject(self, reason):
        self.calls.append(("reject", reason))


@pytest.fixture
def target():
    return object()


@pytest.fixture
def recorder():
    return Recorder()


def run(target, x, recorder):
    resolve_promise(target, x, recorder.resolve, recorder.reject)
    return recorder.calls


@pytest.mark.parametrize("value", [None, 0, 1.5, True, "text", b"bytes", 3j])
def test_primitives_fulfil_directly(target, recorder, value):
    assert run(target, value, recorder) == [("resolve", value)]


def test_plain_objects_fulfil_directly(target, recorder):
    payload = {"then": lambda resolve, reject: resolve("dict keys are not attributes")}
    items = [1, 2]
    assert run(target, payload, recorder) == [("resolve", payload)]
    assert run(target, items, Recorder()) == [("resolve", items)]


def test_self_reference_is_rejected(target, recorder):
    calls = run(target, target, recorder)
    assert len(calls) == 1
    kind, reason = calls[0]
    assert kind == "reject"
    assert isinstance(reason, ChainingCycleError)
    assert str(reason) == "Chaining cycle detected for promise"


def test_non_callable_then_fulfils_with_object(target, recorder):
    class NotThenable:
        then = 5

    obj = NotThenable()
    assert run(target, obj, recorder) == [("resolve", obj)]


def test_then_getter_failure_rejects(target, recorder):
    error = RuntimeError("getter exploded")

    class Exploding:
        @property
        def then(self):
            raise error

    assert run(target, Exploding(), recorder) == [("reject", error)]


def test_then_getter_raising_attribute_error_rejects(target, recorder):
    error = AttributeError("backing field missing")

    class Broken:
        @property
        def then(self):
            raise error

    assert run(target, Broken(), recorder) == [("reject", error)]


def test_dynamic_attribute_lookup_miss_fulfils(target, recorder):
    class Dynamic:
        def __getattr__(self, name):
            raise AttributeError(name)

    obj = Dynamic()
    assert run(target, obj, recorder) == [("resolve", obj)]


def test_then_getter_is_read_once(target, recorder):
    class Counting:
        reads = 0

        @property
        def then(self):
            Counting.reads += 1
            return lambda resolve, reject: resolve("once")

    assert run(target, Counting(), recorder) == [("resolve", "once")]
    assert Counting.reads == 1


def test_then_receives_object_as_receiver(target, recorder):
    class Thenable:
        def __init__(self):
            self.payload = "bound"

        def then(self, resolve, reject):
            resolve(self.payload)

    assert run(target, Thenable(), recorder) == [("resolve", "bound")]


def test_thenable_rejection(target, recorder):
    class Rejecting:
        def then(self, resolve, reject):
            reject("no")

    assert run(target, Rejecting(), recorder) == [("reject", "no")]


@pytest.mark.parametrize(
    "script, expected",
    [
        (["resolve:1", "resolve:2", "reject:x"], ("resolve", 1)),
        (["reject:x", "resolve:1", "resolve:2"], ("reject", "x")),
        (["resolve:1", "reject:x", "resolve:2"], ("resolve", 1)),
    ],
)
def test_latch_allows_a_single_settlement(target, recorder, script, expected):
    class Misbehaving:
        def then(self, resolve, reject):
            for step in script:
                kind, _, payload = step.partition(":")
                value = int(payload) if payload.isdigit() else payload
                (resolve if kind == "resolve" else reject)(value)

    assert run(target, Misbehaving(), recorder) == [expected]


def test_latch_spans_asynchronous_calls(target, recorder):
    captured = {}

    class Later:
        def then(self, resolve, reject):
            captured["resolve"] = resolve
            captured["reject"] = reject

    assert run(target, Later(), recorder) == []

    captured["reject"]("later")
    captured["resolve"]("ignored")
    captured["reject"]("ignored too")
    assert recorder.calls == [("reject", "later")]


def test_exception_after_settlement_is_discarded(target, recorder, caplog):
    class ResolveThenRaise:
        def then(self, resolve, reject):
            resolve("kept")
            raise RuntimeError("discarded")

    with caplog.at_level(logging.DEBUG, logger="imitate_promise"):
        calls = run(target, ResolveThenRaise(), recorder)

    assert calls == [("resolve", "kept")]
    assert any("discarded" in record.getMessage() for record in caplog.records)


def test_exception_before_settlement_rejects(target, recorder):
    error = ValueError("then failed")

    class Raising:
        def then(self, resolve, reject):
            raise error

    assert run(target, Raising(), recorder) == [("reject", error)]


def test_nested_thenables_are_unwrapped_recursively(target, recorder):
    class Wrapper:
        def __init__(self, inner):
            self.inner = inner

        def then(self, resolve, reject):
            resolve(self.inner)

    assert run(target, Wrapper(Wrapper(Wrapper("core"))), recorder) == [("resolve", "core")]


def test_own_promise_is_adopted(scheduler, drain):
    deferred = defer()
    target = defer()

    resolve_promise(target.promise, deferred.promise, target.resolve, target.reject)
    assert target.promise.is_pending()

    deferred.resolve("adopted")
    drain()
    assert target.promise.value == "adopted"


def test_thenable_resolving_to_target_is_a_cycle(scheduler, drain):
    target = defer()

    class Loop:
        def then(self, resolve, reject):
            resolve(target.promise)

    resolve_promise(target.promise, Loop(), target.resolve, target.reject)
    assert target.promise.is_rejected()
    assert isinstance(target.promise.reason, ChainingCycleError)


def test_foreign_promise_subclass_instance(scheduler, drain):
    class OtherPromise(Promise):
        pass

    derived = Promise.resolve(1).then(lambda _: OtherPromise.resolve("subclass"))
    drain()
    assert derived.value == "subclass"
