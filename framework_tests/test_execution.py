import pytest

from topology_tests.utils import execution


class _Counter:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> int:
        self.calls += 1
        return self.calls


class TestExecution:
    def test_not_run_on_creation(self):
        counter = _Counter()

        execution.Execution(counter, label="count").map(str).labeled("counted")

        assert counter.calls == 0

    def test_fresh_evaluation(self):
        counter = _Counter()
        to_exec = execution.Execution(counter, label="count")

        assert to_exec.execute().get() == 1
        assert to_exec.result() == 2
        assert to_exec() == 3

    def test_execute_captures_failure(self):
        def _fail() -> int:
            msg = "boom"
            raise ValueError(msg)

        result = execution.Execution(_fail, label="failing").execute()

        assert not result.ok
        assert result.label == "failing"
        assert isinstance(result.error, ValueError)
        with pytest.raises(ValueError, match="boom"):
            result.get()

    def test_result_raises(self):
        to_exec = execution.Execution(lambda: 1 // 0)

        with pytest.raises(ZeroDivisionError):
            to_exec.result()

    def test_map(self):
        counter = _Counter()
        mapped = execution.Execution(counter, label="count").map(lambda v: v * 10)

        assert mapped.label == "count"
        assert mapped.result() == 10
        assert mapped.result() == 20

    def test_map_failure(self):
        mapped = execution.Execution(lambda: "x").map(int)

        assert isinstance(mapped.execute().error, ValueError)

    def test_labeled(self):
        to_exec = execution.Execution(lambda: 1, label="first")
        labeled = to_exec.labeled("second")

        assert to_exec.label == "first"
        assert labeled.label == "second"
        assert labeled.result() == 1
        assert repr(labeled) == "Execution('second')"


class TestPredicate:
    def test_is_satisfied(self):
        state = {"ready": False}
        ready = execution.Predicate(lambda: state["ready"], label="ready")

        assert not ready.is_satisfied()
        state["ready"] = True
        assert ready.is_satisfied()

    def test_labeled_keeps_type(self):
        labeled = execution.Predicate(lambda: True).labeled("always")

        assert isinstance(labeled, execution.Predicate)
        assert labeled.is_satisfied()

    def test_composition(self):
        yes = execution.Predicate(lambda: True, label="yes")
        no = execution.Predicate(lambda: False, label="no")

        assert (yes & yes).is_satisfied()
        assert not (yes & no).is_satisfied()
        assert (yes | no).is_satisfied()
        assert not (no | no).is_satisfied()
        assert (~no).is_satisfied()
        assert (yes & ~no).label == "(yes and not no)"

    def test_composition_short_circuits(self):
        counter = _Counter()
        counting = execution.Predicate(lambda: bool(counter()), label="counting")
        no = execution.Predicate(lambda: False, label="no")
        yes = execution.Predicate(lambda: True, label="yes")

        assert not (no & counting).is_satisfied()
        assert (yes | counting).is_satisfied()
        assert counter.calls == 0

    def test_decorator(self):
        @execution.predicate()
        def service_ready() -> bool:
            return True

        @execution.predicate(label="db is up")
        def db_up() -> bool:
            return False

        assert isinstance(service_ready, execution.Predicate)
        assert service_ready.label == "service_ready"
        assert service_ready.is_satisfied()
        assert db_up.label == "db is up"
        assert not db_up.execute().get()
