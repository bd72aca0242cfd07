"""
Tests moteur de formulaire — navigation, validation par étape, soumission,
auto-avance, fermeture, analytics.
"""
import sys, os, asyncio, time
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from leadpages.core.schemas import BlockConfig, FormFlow, FormStep
from leadpages.errors import ConfigurationError
from leadpages.flow import (
    AnalyticsTracker, CallableSubmissionSink, FlowState, FormFlowEngine, MemoryAnalyticsSink,
    SubmissionContext, SubmissionResult, check_flow, validate_values,
)

CHOICES = [{"value": "owner", "label": "Owner"}, {"value": "buyer", "label": "Buyer"}]

VALID = {
    "addr": "1 Queen Street, Auckland",
    "choice": "owner",
    "name": "Jane",
    "email": "jane@example.co.nz",
    "phone": "021 123 4567",
    "consent": True,
}


def _flow(auto_advance: bool = False) -> FormFlow:
    """A(addr) → B(choice) → C(name, email, phone, consent), tous requis."""
    return FormFlow(steps=[
        FormStep(id="a", title="A", blocks=[
            BlockConfig(id="addr", type="address-finder", props={"fieldName": "addr", "required": True}),
        ]),
        FormStep(id="b", title="B", blocks=[
            BlockConfig(id="choice", type="radio-cards", props={
                "fieldName": "choice", "required": True, "options": CHOICES, "autoAdvance": auto_advance,
            }),
        ]),
        FormStep(id="c", title="C", blocks=[
            BlockConfig(id="name", type="text-input", props={"fieldName": "name", "required": True}),
            BlockConfig(id="email", type="email-input", props={"fieldName": "email", "required": True}),
            BlockConfig(id="phone", type="phone-input", props={"fieldName": "phone", "required": True}),
            BlockConfig(id="consent", type="checkbox", props={"fieldName": "consent", "required": True}),
        ]),
    ])


class RecordingSink:
    def __init__(self, result=None, delay: float = 0.0, error: Exception = None):
        self.calls = []
        self.result = result or SubmissionResult(success=True, id="lead-1")
        self.delay = delay
        self.error = error

    async def submit(self, payload, context):
        self.calls.append((payload, context))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.result


def _engine(sink=None, **kwargs) -> FormFlowEngine:
    return FormFlowEngine(_flow(kwargs.pop("auto_advance", False)), sink=sink, **kwargs)


def _fill(engine: FormFlowEngine, values=VALID):
    for k, v in values.items():
        engine.set_value(k, v)


# ── Construction ───────────────────────────────────────────────────────────

class TestConstruction:
    def test_initial_state(self):
        engine = _engine()
        assert engine.current_step == 1
        assert engine.total_steps == 3
        assert engine.state == FlowState.STEP
        assert engine.is_first_step and not engine.is_last_step

    def test_no_steps_is_configuration_error(self):
        with pytest.raises(ConfigurationError) as exc:
            FormFlowEngine(FormFlow())
        assert [i.code for i in exc.value.issues] == ["no_steps"]

    def test_duplicate_field_is_configuration_error(self):
        flow = _flow()
        flow.steps[2].blocks.append(BlockConfig(id="addr2", type="text-input", props={"fieldName": "addr"}))
        with pytest.raises(ConfigurationError):
            FormFlowEngine(flow)
        assert [i.code for i in check_flow(flow)] == ["duplicate_field"]

    def test_field_names_and_steps(self):
        engine = _engine()
        assert engine.field_names == ["addr", "choice", "name", "email", "phone", "consent"]
        assert engine.step_of("email") == 3
        assert engine.step_of("nope") is None

    def test_independent_stores(self):
        a, b = _engine(), _engine()
        a.set_value("addr", "x")
        assert b.value_of("addr") is None


# ── Navigation ─────────────────────────────────────────────────────────────

class TestNextStep:
    def test_empty_required_blocks_step(self):
        engine = _engine()
        result = engine.next_step()
        assert not result.ok
        assert engine.current_step == 1
        assert list(result.errors) == ["addr"]
        assert list(engine.errors) == ["addr"]

    def test_validate_step_out_of_range(self):
        engine = _engine()
        assert engine.validate_step(0) == {}
        assert engine.validate_step(4) == {}
        assert list(engine.validate_step()) == ["addr"]

    def test_fill_and_retry_advances(self):
        engine = _engine()
        engine.next_step()
        engine.set_value("addr", VALID["addr"])
        assert engine.errors == {}
        result = engine.next_step()
        assert result.ok and result.advanced
        assert engine.current_step == 2

    def test_only_current_step_validated(self):
        engine = _engine()
        engine.set_value("addr", VALID["addr"])
        result = engine.next_step()
        assert result.ok
        assert "email" not in engine.errors

    def test_invalid_choice_rejected(self):
        engine = _engine()
        engine.go_to_step(2)
        engine.set_value("choice", "landlord")
        assert engine.next_step().errors == {"choice": "Please select one of the available options"}

    def test_last_step_next_does_not_navigate(self):
        engine = _engine()
        _fill(engine)
        engine.go_to_step(3)
        result = engine.next_step()
        assert result.ok and not result.advanced
        assert engine.current_step == 3
        assert engine.state == FlowState.STEP

    def test_step_errors_field_scoped(self):
        engine = _engine()
        engine.go_to_step(3)
        engine.set_value("name", "Jane")
        engine.set_value("email", "a@b")
        engine.set_value("consent", False)
        errors = engine.next_step().errors
        assert errors == {
            "email": "Please enter a valid email address",
            "phone": "Phone number is required",
            "consent": "You must agree to continue",
        }


class TestPrevAndGoTo:
    def test_prev_no_op_on_first(self):
        engine = _engine()
        assert engine.prev_step() is False
        assert engine.current_step == 1

    def test_prev_without_validation(self):
        engine = _engine()
        engine.go_to_step(3)
        assert engine.prev_step() is True
        assert engine.current_step == 2
        assert engine.errors == {}

    def test_go_to_bounds(self):
        engine = _engine()
        assert engine.go_to_step(0) is False
        assert engine.go_to_step(4) is False
        assert engine.go_to_step(3) is True
        assert engine.current_step == 3


class TestOptionalSingleStep:
    def _engine(self, sink=None):
        flow = FormFlow(steps=[FormStep(id="only", title="Only", blocks=[
            BlockConfig(id="note", type="text-input", props={"fieldName": "note", "required": False}),
        ])])
        return FormFlowEngine(flow, sink=sink)

    def test_next_succeeds_empty(self):
        assert self._engine().next_step().ok

    def test_submit_succeeds_empty(self):
        sink = RecordingSink()
        engine = self._engine(sink)
        result = asyncio.run(engine.submit_form())
        assert result.ok
        assert engine.state == FlowState.SUBMITTED
        assert len(sink.calls) == 1


# ── Soumission ─────────────────────────────────────────────────────────────

class TestSubmit:
    def test_missing_field_any_step_blocks_submit(self):
        sink = RecordingSink()
        engine = _engine(sink)
        values = dict(VALID)
        del values["choice"]
        _fill(engine, values)
        engine.go_to_step(3)
        result = asyncio.run(engine.submit_form())
        assert not result.ok
        assert result.errors == {"choice": "Please select an option"}
        assert engine.state == FlowState.STEP
        assert engine.current_step == 3
        assert sink.calls == []

    def test_success(self):
        sink = RecordingSink()
        engine = _engine(sink)
        _fill(engine)
        engine.go_to_step(3)
        ctx = SubmissionContext(source_page_id="page-1", tracking_params={"utm_source": "fb"})
        result = asyncio.run(engine.submit_form(ctx))
        assert result.ok and result.submission_id == "lead-1"
        assert engine.state == FlowState.SUBMITTED
        payload, context = sink.calls[0]
        assert payload == VALID
        assert context.source_page_id == "page-1"

    def test_submitted_is_terminal(self):
        sink = RecordingSink()
        engine = _engine(sink)
        _fill(engine)
        asyncio.run(engine.submit_form())
        assert engine.set_value("name", "Other") is False
        assert engine.go_to_step(1) is False
        assert engine.prev_step() is False
        again = asyncio.run(engine.submit_form())
        assert again.ignored
        assert len(sink.calls) == 1

    def test_sink_failure_keeps_values_and_allows_retry(self):
        sink = RecordingSink(result=SubmissionResult(success=False, error="Server said no"))
        engine = _engine(sink)
        _fill(engine)
        result = asyncio.run(engine.submit_form())
        assert not result.ok
        assert engine.state == FlowState.SUBMIT_ERROR
        assert engine.submit_error == "Server said no"
        assert engine.values.as_dict() == VALID

        sink.result = SubmissionResult(success=True, id="lead-2")
        assert asyncio.run(engine.submit_form()).ok
        assert engine.submission_id == "lead-2"
        assert len(sink.calls) == 2

    def test_sink_exception_becomes_submit_error(self):
        engine = _engine(RecordingSink(error=ConnectionError("down")))
        _fill(engine)
        result = asyncio.run(engine.submit_form())
        assert result.state == FlowState.SUBMIT_ERROR
        assert result.error == "Something went wrong. Please try again."

    def test_timeout_becomes_submit_error(self):
        engine = _engine(RecordingSink(delay=1.0), submit_timeout=0.01)
        _fill(engine)
        result = asyncio.run(engine.submit_form())
        assert result.state == FlowState.SUBMIT_ERROR
        assert "timed out" in result.error

    def test_no_sink_is_submit_error(self):
        engine = _engine()
        _fill(engine)
        assert asyncio.run(engine.submit_form()).state == FlowState.SUBMIT_ERROR

    def test_navigation_clears_submit_error(self):
        engine = _engine(RecordingSink(result=SubmissionResult(success=False)))
        _fill(engine)
        engine.go_to_step(3)
        asyncio.run(engine.submit_form())
        engine.prev_step()
        assert engine.state == FlowState.STEP
        assert engine.submit_error is None

    def test_concurrent_submit_ignored(self):
        sink = RecordingSink(delay=0.05)
        engine = _engine(sink)
        _fill(engine)

        async def run():
            first = asyncio.ensure_future(engine.submit_form())
            await asyncio.sleep(0)
            assert engine.state == FlowState.SUBMITTING
            assert engine.set_value("name", "Changed") is False
            second = await engine.submit_form()
            return await first, second

        first, second = asyncio.run(run())
        assert first.ok and second.ignored
        assert len(sink.calls) == 1

    def test_result_after_close_ignored(self):
        engine = _engine(RecordingSink(delay=0.05))
        _fill(engine)

        async def run():
            task = asyncio.ensure_future(engine.submit_form())
            await asyncio.sleep(0)
            engine.close()
            return await task

        result = asyncio.run(run())
        assert result.ignored
        assert engine.state == FlowState.SUBMITTING
        assert engine.is_closed

    def test_callable_sink(self):
        seen = []

        def store(payload, context):
            seen.append(payload)
            return {"success": True, "id": "abc"}

        engine = _engine(CallableSubmissionSink(store))
        _fill(engine)
        assert asyncio.run(engine.submit_form()).submission_id == "abc"
        assert seen == [VALID]


class TestValidateValues:
    def test_whole_flow(self):
        errors = validate_values(_flow(), {"addr": "x"})
        assert set(errors) == {"choice", "name", "email", "phone", "consent"}

    def test_all_valid(self):
        assert validate_values(_flow(), VALID) == {}


# ── Auto-avance ────────────────────────────────────────────────────────────

class TestAutoAdvance:
    def test_card_selection_advances_after_delay(self):
        engine = _engine(auto_advance=True, auto_advance_delay=0.01)
        engine.set_value("addr", VALID["addr"])
        engine.next_step()
        assert engine.current_step == 2

        async def run():
            task = engine.on_field_committed("choice", "buyer")
            assert task is not None
            assert engine.current_step == 2
            await task

        asyncio.run(run())
        assert engine.current_step == 3

    def test_invalid_selection_does_not_skip_validation(self):
        engine = _engine(auto_advance=True, auto_advance_delay=0.01)
        engine.go_to_step(2)

        async def run():
            await engine.on_field_committed("choice", "landlord")

        asyncio.run(run())
        assert engine.current_step == 2
        assert "choice" in engine.errors

    def test_navigation_during_delay_cancels_advance(self):
        engine = _engine(auto_advance=True, auto_advance_delay=0.05)
        engine.go_to_step(2)

        async def run():
            task = engine.on_field_committed("choice", "owner")
            engine.prev_step()
            return await task

        assert asyncio.run(run()) is None
        assert engine.current_step == 1

    def test_without_loop_advances_immediately(self):
        engine = _engine(auto_advance=True)
        engine.go_to_step(2)
        assert engine.on_field_committed("choice", "owner") is None
        assert engine.current_step == 3

    def test_non_auto_field_only_sets_value(self):
        engine = _engine(auto_advance=False)
        engine.go_to_step(2)
        assert engine.on_field_committed("choice", "owner") is None
        assert engine.current_step == 2
        assert engine.value_of("choice") == "owner"

    def test_close_cancels_pending(self):
        engine = _engine(auto_advance=True, auto_advance_delay=0.05)
        engine.go_to_step(2)

        async def run():
            task = engine.on_field_committed("choice", "owner")
            engine.close()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(run())
        assert engine.current_step == 2


# ── Analytics ──────────────────────────────────────────────────────────────

class TestEngineAnalytics:
    def test_events(self):
        sink = MemoryAnalyticsSink()
        tracker = AnalyticsTracker(sink, landing_page_id="p1", session_id="s1")
        engine = _engine(RecordingSink(), analytics=tracker)
        _fill(engine)
        engine.next_step()
        engine.next_step()
        asyncio.run(engine.submit_form())
        types = [(e["eventType"], e.get("stepNumber")) for e in sink.events]
        assert types == [("form_start", None), ("step_complete", 1), ("step_complete", 2), ("form_submit", None)]
        assert sink.events[1]["eventData"] == {"addr": VALID["addr"]}
        assert all(e["landingPageId"] == "p1" and e["sessionId"] == "s1" for e in sink.events)

    def test_analytics_failure_does_not_block(self):
        class Broken:
            def send(self, event):
                raise RuntimeError("analytics down")

        engine = _engine(analytics=AnalyticsTracker(Broken()))
        engine.set_value("addr", VALID["addr"])
        assert engine.next_step().ok
        assert engine.current_step == 2

    def test_slow_sink_does_not_stall_the_loop(self):
        class SlowSink:
            def __init__(self):
                self.events = []

            def send(self, event):
                time.sleep(0.3)
                self.events.append(event)

        sink = SlowSink()
        tracker = AnalyticsTracker(sink)
        engine = _engine(auto_advance=True, auto_advance_delay=0.01, analytics=tracker)

        async def run():
            gaps = []

            async def ticker():
                last = time.monotonic()
                while engine.current_step < 3:
                    await asyncio.sleep(0.01)
                    now = time.monotonic()
                    gaps.append(now - last)
                    last = now

            tick = asyncio.create_task(ticker())
            engine.set_value("addr", VALID["addr"])
            started = time.monotonic()
            assert engine.next_step().ok
            elapsed = time.monotonic() - started
            await engine.on_field_committed("choice", "owner")
            await asyncio.wait_for(tick, timeout=2)
            await tracker.drain()
            return elapsed, max(gaps)

        elapsed, worst_gap = asyncio.run(run())
        assert elapsed < 0.1
        assert worst_gap < 0.2
        assert engine.current_step == 3
        assert sorted(e["eventType"] for e in sink.events) == ["form_start", "step_complete", "step_complete"]
