"""Journey Model Tests.

Tests for:
- JourneyState invariants enforced on validation
- Lossless dict/JSON round trips
- ID helpers
"""

import re
import unittest
from datetime import UTC, datetime

from pydantic import ValidationError

from journeyforge.core.enums import GradeBand, PhaseType
from journeyforge.core.models.journey import (
    Activity,
    Deliverable,
    IterationSupport,
    JourneyState,
    Objective,
    format_weeks,
)
from journeyforge.phases.workflow.engine import PhaseWorkflowEngine
from journeyforge.utils.ids import generate_id


def fixed_clock() -> datetime:
    return datetime(2026, 2, 9, 8, 15, 30, tzinfo=UTC)


def populated_state() -> JourneyState:
    engine = PhaseWorkflowEngine.from_seed(clock=fixed_clock, project_id="round-trip")
    engine.add_objective(0, "Interview three neighbours")
    engine.add_activity(
        0,
        Activity(
            name="Walkabout",
            description="Photograph the street",
            duration="1 hour",
            resources=["Camera", "Clipboard"],
            student_choice=True,
        ),
    )
    engine.add_deliverable(0, Deliverable(name="Map", format="poster", assessment_criteria=["Accuracy"]))
    engine.navigate_to_phase(2)
    engine.navigate_to_phase(0)
    engine.confirm_iteration("Street data was thin")
    return engine.state


class JourneyStateSerializationTest(unittest.TestCase):

    def test_dict_round_trip(self) -> None:
        state = populated_state()
        data = state.to_dict()

        self.assertEqual(data["phases"][0]["type"], "ANALYZE")
        self.assertEqual(data["grade_level"], "middle")
        self.assertIsInstance(data["iteration_history"][0]["timestamp"], str)

        restored = JourneyState.from_dict(data)
        self.assertEqual(restored, state)
        self.assertEqual(restored.iteration_history[0].timestamp, fixed_clock())
        self.assertEqual(restored.phases[0].activities[0].resources, ["Camera", "Clipboard"])

    def test_json_round_trip(self) -> None:
        state = populated_state()
        self.assertEqual(JourneyState.from_json(state.to_json()), state)


class JourneyStateValidationTest(unittest.TestCase):

    def setUp(self) -> None:
        self.data = PhaseWorkflowEngine.from_seed().state.to_dict()

    def test_requires_four_phases_in_order(self) -> None:
        self.data["phases"] = self.data["phases"][:3]
        with self.assertRaises(ValidationError):
            JourneyState.from_dict(self.data)

    def test_rejects_reordered_phases(self) -> None:
        self.data["phases"] = list(reversed(self.data["phases"]))
        with self.assertRaises(ValidationError):
            JourneyState.from_dict(self.data)

    def test_rejects_bad_allocation_total(self) -> None:
        self.data["phases"][0]["allocation"] = 0.5
        with self.assertRaises(ValidationError):
            JourneyState.from_dict(self.data)

    def test_rejects_pointer_out_of_range(self) -> None:
        self.data["current_phase_index"] = 7
        with self.assertRaises(ValidationError):
            JourneyState.from_dict(self.data)

    def test_grade_text_normalised(self) -> None:
        self.data["grade_level"] = "7th grade middle school"
        self.assertEqual(JourneyState.from_dict(self.data).grade_level, GradeBand.MIDDLE)

    def test_time_buffer_bounds(self) -> None:
        with self.assertRaises(ValidationError):
            IterationSupport(time_buffer=120)

    def test_snapshots_are_frozen(self) -> None:
        state = JourneyState.from_dict(self.data)
        with self.assertRaises(ValidationError):
            state.current_phase_index = 2

    def test_current_phase(self) -> None:
        state = JourneyState.from_dict(self.data)
        self.assertEqual(state.current_phase.type, PhaseType.ANALYZE)
        self.assertEqual(state.phase_index(PhaseType.EVALUATE), 3)
        self.assertEqual(format_weeks(1), "1 week")
        self.assertEqual(format_weeks(3), "3 weeks")


def test_id_generation():
    first = generate_id("OBJ")
    second = generate_id("OBJ")

    assert re.fullmatch(r"OBJ_\d+_\d{3,}", first)
    assert first != second
    assert int(second.rsplit("_", 1)[1]) == int(first.rsplit("_", 1)[1]) + 1
    assert re.fullmatch(r"\d+_\d{3,}", generate_id())

    objective = Objective(text="Trace the water")
    assert objective.id.startswith("OBJ_")
    assert Activity(name="Walk", description="Walk the bank", duration="1 hour").id.startswith("ACT_")


if __name__ == "__main__":
    unittest.main()
