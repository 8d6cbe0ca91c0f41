import pytest

from smokeqa.core.constants import FailureKind, Outcome
from smokeqa.core.errors import PreconditionUnmet, TransportError, WaitTimeout
from smokeqa.modules.flow.sequencer import StageSequencer
from smokeqa.modules.flow.stage import Stage


class _Recorder:
    def __init__(self):
        self.calls = []

    def action(self, name, exc=None):
        def _act():
            self.calls.append(f"{name}.action")
            if exc is not None:
                raise exc
        return _act

    def check(self, name, result=True):
        def _check():
            self.calls.append(f"{name}.verify")
            return result
        return _check


def test_fail_fast_stops_after_first_failure():
    rec = _Recorder()
    seq = StageSequencer()
    stages = [
        Stage("A", action=rec.action("A"), verification=rec.check("A")),
        Stage("B", action=rec.action("B"), verification=rec.check("B", False)),
        Stage("C", action=rec.action("C"), verification=rec.check("C")),
    ]

    assert seq.run(stages) is False
    assert rec.calls == ["A.action", "A.verify", "B.action", "B.verify"]
    assert [(o.stage_name, o.outcome) for o in seq.outcomes] == [("A", Outcome.PASS), ("B", Outcome.FAIL)]
    assert seq.last.kind == FailureKind.VERIFY


def test_block_skips_action_and_verification():
    rec = _Recorder()
    seq = StageSequencer()
    stages = [
        Stage("A", precondition=lambda: False, action=rec.action("A"), verification=rec.check("A")),
        Stage("B", action=rec.action("B")),
    ]

    assert seq.run(stages) is False
    assert rec.calls == []
    assert len(seq.outcomes) == 1
    assert seq.last.outcome == Outcome.BLOCK
    assert seq.last.kind == FailureKind.BLOCK


def test_precondition_unmet_exception_is_block_with_reason():
    def _pre():
        raise PreconditionUnmet("app not started")

    seq = StageSequencer()
    assert seq.run([Stage("A", precondition=_pre)]) is False
    assert seq.last.outcome == Outcome.BLOCK
    assert seq.last.reason == "app not started"


def test_action_timeout_and_error_are_distinguished():
    timeout_seq = StageSequencer()
    timeout_seq.run([Stage("A", action=_Recorder().action("A", WaitTimeout("menu_button", 30)))])
    assert timeout_seq.last.outcome == Outcome.FAIL
    assert timeout_seq.last.kind == FailureKind.TIMEOUT
    assert "menu_button" in timeout_seq.last.reason

    error_seq = StageSequencer()
    error_seq.run([Stage("A", action=_Recorder().action("A", ValueError("bad shape")))])
    assert error_seq.last.kind == FailureKind.ERROR
    assert error_seq.last.reason == "ValueError: bad shape"


def test_verification_timeout_classified_as_timeout():
    def _verify():
        raise WaitTimeout("terms_screen", 30)

    seq = StageSequencer()
    assert seq.run([Stage("A", verification=_verify)]) is False
    assert seq.last.kind == FailureKind.TIMEOUT


def test_verification_exception_recorded_as_error():
    rec = _Recorder()

    def _verify():
        raise ValueError("bad frame")

    seq = StageSequencer()
    stages = [Stage("A", verification=_verify), Stage("B", action=rec.action("B"))]

    assert seq.run(stages) is False
    assert rec.calls == []
    assert len(seq.outcomes) == 1
    assert seq.last.outcome == Outcome.FAIL
    assert seq.last.kind == FailureKind.ERROR
    assert seq.last.reason == "ValueError: bad frame"


def test_fatal_error_in_verification_propagates():
    def _verify():
        raise TransportError("offline")

    seq = StageSequencer()
    with pytest.raises(TransportError):
        seq.run([Stage("A", verification=_verify)])
    assert seq.outcomes == ()


def test_transport_error_propagates():
    seq = StageSequencer()
    with pytest.raises(TransportError):
        seq.run([Stage("A", action=_Recorder().action("A", TransportError("offline")))])
    assert seq.outcomes == ()


def test_interrupt_propagates():
    seq = StageSequencer()
    with pytest.raises(KeyboardInterrupt):
        seq.run([Stage("A", action=_Recorder().action("A", KeyboardInterrupt()))])


def test_evidence_captured_for_fail_and_block_only(tmp_path):
    prefixes = []

    def capture(prefix):
        prefixes.append(prefix)
        return tmp_path / f"{prefix}.png"

    seq = StageSequencer(case_id="TC08", capture=capture)
    seq.run([Stage("A"), Stage("B", verification=lambda: False)])
    StageSequencer(case_id="TC02", capture=capture).run([Stage("C", precondition=lambda: False)])

    assert prefixes == ["TC08_B_Fail", "TC02_C_Block"]
    assert seq.last.evidence == tmp_path / "TC08_B_Fail.png"


def test_evidence_failure_does_not_mask_outcome():
    def capture(prefix):
        raise TransportError("screencap failed")

    seq = StageSequencer(capture=capture)
    assert seq.run([Stage("A", verification=lambda: False)]) is False
    assert seq.last.outcome == Outcome.FAIL
    assert seq.last.evidence is None


def test_stage_hook_overrides_default_capture():
    hooked = []
    seq = StageSequencer(capture=lambda prefix: pytest.fail("default capture used"))
    seq.run([Stage("A", verification=lambda: False, on_failure=lambda name, reason: hooked.append((name, reason)))])
    assert hooked == [("A", "verification failed")]


def test_outcome_listener_and_indices():
    seen = []
    seq = StageSequencer(on_outcome=seen.append)
    assert seq.run([Stage("A"), Stage("B", index=7)]) is True
    assert [(o.stage_name, o.index) for o in seen] == [("A", 1), ("B", 7)]
