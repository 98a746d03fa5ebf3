"""Extraction Engine Tests.

Tests for:
- Strategy precedence (structured > marked > table > numbered > paragraph > minimal)
- Fallback gating and min_confidence
- Rubric weight distribution
- Never raising on odd input
"""

import unittest

from journeyforge.app.config import ParsingConfig
from journeyforge.core.models.extraction import (
    ActivityCategory,
    ExtractionFormat,
    ExtractionResult,
    IdeationData,
    RubricData,
)
from journeyforge.phases.extraction.engine import ExtractionEngine, parse_text
from journeyforge.phases.extraction.strategies import Matched, Strategy


STRUCTURED_PHASES = """Here is the plan you asked for:

```json
{"phases": [
  {"title": "Investigate", "focus": "Water quality in the creek",
   "activities": ["Sample", "Test"], "duration": "2 weeks"},
  {"name": "Build", "description": "Filter prototypes"}
]}
```
"""


class PhaseExtractionTest(unittest.TestCase):
    """Phase suggestions through the full cascade."""

    def setUp(self) -> None:
        self.engine = ExtractionEngine()

    def test_structured_block_wins(self) -> None:
        result = self.engine.parse_phases(STRUCTURED_PHASES)

        self.assertEqual(result.format, ExtractionFormat.STRUCTURED)
        self.assertEqual(result.confidence, 1.0)
        self.assertEqual(result.item_count, 2)
        first, second = result.data
        self.assertEqual(first.title, "Investigate")
        self.assertEqual(first.focus, "Water quality in the creek")
        self.assertEqual(first.activities, ["Sample", "Test"])
        self.assertEqual(first.duration, "2 weeks")
        self.assertEqual(second.title, "Build")
        self.assertEqual(second.focus, "Filter prototypes")
        self.assertEqual(second.duration, "1 week")
        self.assertEqual(result.warnings, [])

    def test_malformed_block_falls_through_to_marked(self) -> None:
        text = 'Draft: {"phases": [broken\nPhase 1: Explore\nFocus: water'
        result = self.engine.parse_phases(text)

        self.assertEqual(result.format, ExtractionFormat.MARKED_LIST)
        self.assertEqual(result.confidence, 0.9)
        self.assertEqual(result.data[0].title, "Explore")
        self.assertEqual(result.data[0].focus, "water")

    def test_marked_beats_numbered(self) -> None:
        text = (
            "Phase 1: Discover\n"
            "Focus: local rivers\n"
            "Activities: research, interview\n"
            "1. Survey: walk the river\n"
            "2. Report: write it up"
        )
        result = self.engine.parse_phases(text)

        self.assertEqual(result.format, ExtractionFormat.MARKED_LIST)
        self.assertEqual(len(result.data), 1)
        phase = result.data[0]
        self.assertEqual(phase.id, "phase_1")
        self.assertEqual(phase.title, "Discover")
        self.assertEqual(phase.focus, "local rivers")
        self.assertEqual(phase.activities, ["research", "interview"])
        self.assertEqual(phase.duration, "1 week")

    def test_enumerated_phase_headers(self) -> None:
        result = self.engine.parse_phases(
            "1. Phase 1: Research the problem\n2. Phase 2: Build prototypes"
        )

        self.assertEqual(result.format, ExtractionFormat.MARKED_LIST)
        self.assertEqual(
            [p.title for p in result.data], ["Research the problem", "Build prototypes"]
        )
        self.assertEqual([p.focus for p in result.data], ["", ""])

    def test_markdown_is_cleaned_before_matching(self) -> None:
        text = (
            "**Phase 1:** Discover\n"
            "* Focus: rivers\n"
            "* Activities: map, sample\n"
            "* Duration: 2 weeks"
        )
        result = self.engine.parse_phases(text)

        self.assertEqual(result.format, ExtractionFormat.MARKED_LIST)
        self.assertEqual(result.data[0].title, "Discover")
        self.assertEqual(result.data[0].activities, ["map", "sample"])
        self.assertEqual(result.data[0].duration, "2 weeks")

    def test_preserve_markdown_matches_raw_text(self) -> None:
        engine = ExtractionEngine(ParsingConfig(preserve_markdown=True))
        result = engine.parse_phases("**Phase 1:** Discover the local rivers and their history")

        self.assertEqual(result.format, ExtractionFormat.PARAGRAPH_HEURISTIC)

    def test_numbered_list(self) -> None:
        text = (
            "1. Research: explore the local watershed for 2 weeks\n"
            "2. Design: create prototypes"
        )
        result = self.engine.parse_phases(text)

        self.assertEqual(result.format, ExtractionFormat.NUMBERED_LIST)
        self.assertEqual(result.confidence, 0.8)
        self.assertEqual([p.title for p in result.data], ["Research", "Design"])
        self.assertEqual(result.data[0].duration, "2 weeks")
        self.assertEqual(result.data[0].activities, ["explore the local watershed for"])
        self.assertEqual(result.data[1].activities, ["create prototypes"])
        self.assertFalse(result.is_degraded)

    def test_paragraph_heuristic_is_degraded(self) -> None:
        text = (
            "Students explore the river ecosystem and record observations.\n\n"
            "Teams design a water filter prototype in 3 days."
        )
        result = self.engine.parse_phases(text)

        self.assertEqual(result.format, ExtractionFormat.PARAGRAPH_HEURISTIC)
        self.assertEqual(result.confidence, 0.5)
        self.assertEqual(len(result.data), 2)
        self.assertEqual(result.data[0].title, "Students explore the river ecosystem")
        self.assertEqual(result.data[1].duration, "3 days")
        self.assertTrue(result.is_degraded)
        self.assertTrue(any("Low-confidence" in w for w in result.warnings))

    def test_empty_text_yields_minimal_phase(self) -> None:
        result = self.engine.parse_phases("")

        self.assertEqual(result.format, ExtractionFormat.MINIMAL_FALLBACK)
        self.assertEqual(result.confidence, 0.3)
        self.assertEqual(len(result.data), 1)
        phase = result.data[0]
        self.assertEqual(phase.title, "Project Phase")
        self.assertEqual(phase.activities, ["Explore", "Create", "Share"])
        self.assertEqual(phase.duration, "1 week")

    def test_minimal_phase_truncates_focus(self) -> None:
        result = self.engine.parse_phases("short")

        self.assertEqual(result.format, ExtractionFormat.MINIMAL_FALLBACK)
        self.assertEqual(result.data[0].focus, "short")


class FallbackGatingTest(unittest.TestCase):
    """enable_fallback and min_confidence behaviour."""

    def test_no_fallback_returns_empty_none_result(self) -> None:
        engine = ExtractionEngine(ParsingConfig(enable_fallback=False))
        result = engine.parse_phases("just some words here that match nothing in particular")

        self.assertEqual(result.data, [])
        self.assertEqual(result.confidence, 0.0)
        self.assertEqual(result.format, ExtractionFormat.NONE)
        self.assertTrue(result.is_empty)
        self.assertFalse(result.should_auto_apply())
        self.assertEqual(
            result.warnings, ["No phases could be extracted and fallback is disabled"]
        )

    def test_no_fallback_empty_rubric(self) -> None:
        engine = ExtractionEngine(ParsingConfig(enable_fallback=False))
        result = engine.parse_rubric("")

        self.assertIsInstance(result.data, RubricData)
        self.assertEqual(result.data.criteria, [])
        self.assertEqual(result.format, ExtractionFormat.NONE)

    def test_min_confidence_skips_primary_strategies(self) -> None:
        engine = ExtractionEngine(ParsingConfig(min_confidence=0.85))
        result = engine.parse_phases("1. Research: gather data\n2. Build: make it")

        self.assertEqual(result.format, ExtractionFormat.PARAGRAPH_HEURISTIC)

    def test_min_confidence_without_fallback_returns_none(self) -> None:
        engine = ExtractionEngine(ParsingConfig(enable_fallback=False, min_confidence=0.95))
        result = engine.parse_phases("Phase 1: Discover\nFocus: rivers")

        self.assertEqual(result.format, ExtractionFormat.NONE)
        self.assertEqual(result.confidence, 0.0)

    def test_structured_still_runs_at_high_threshold(self) -> None:
        engine = ExtractionEngine(ParsingConfig(enable_fallback=False, min_confidence=1.0))
        result = engine.parse_phases(STRUCTURED_PHASES)

        self.assertEqual(result.format, ExtractionFormat.STRUCTURED)

    def test_odd_inputs_never_raise(self) -> None:
        engine = ExtractionEngine()
        odd_inputs = [
            "", "   ", "{", "}{", "```", "```json\n```", "| | |", "\n\n\n",
            "1.", "Phase", "[1, 2, 3]", '{"phases": 7}', "☃" * 500, None,
        ]
        for text in odd_inputs:
            for kind in ("phases", "activities", "resources", "rubric", "ideation"):
                result = engine.parse(kind, text)
                self.assertIsInstance(result, ExtractionResult)
                self.assertGreaterEqual(result.item_count, 1, f"{kind}: {text!r}")

    def test_failing_strategy_is_skipped(self) -> None:
        def explode(text: str):
            raise RuntimeError("boom")

        strategies = (
            Strategy("explode", ExtractionFormat.STRUCTURED, 1.0, explode),
            Strategy(
                "fixed",
                ExtractionFormat.MARKED_LIST,
                0.9,
                lambda text: Matched(["Fixed resource"]),
            ),
        )
        engine = ExtractionEngine(strategies={"resources": strategies})
        result = engine.parse_resources("anything")

        self.assertEqual(result.data, ["Fixed resource"])
        self.assertEqual(result.format, ExtractionFormat.MARKED_LIST)

    def test_unknown_kind_rejected(self) -> None:
        with self.assertRaises(ValueError):
            ExtractionEngine().parse("lesson-plans", "text")
        with self.assertRaises(ValueError):
            ExtractionEngine(strategies={"lesson-plans": ()})


class RubricExtractionTest(unittest.TestCase):
    """Rubric criteria and weights."""

    def setUp(self) -> None:
        self.engine = ExtractionEngine()

    def test_numbered_rubric_equal_weights(self) -> None:
        text = (
            "1. Research Skills: gather data from several sources\n"
            "2. Critical Thinking: evaluate evidence\n"
            "3. Communication: present findings clearly\n"
            "4. Collaboration: work in teams"
        )
        result = self.engine.parse_rubric(text)

        self.assertEqual(result.format, ExtractionFormat.NUMBERED_LIST)
        self.assertEqual(result.confidence, 0.8)
        self.assertEqual(
            [c.name for c in result.data.criteria],
            ["Research Skills", "Critical Thinking", "Communication", "Collaboration"],
        )
        self.assertEqual(result.data.weights, [25, 25, 25, 25])
        self.assertEqual(result.data.criteria[1].description, "evaluate evidence")
        self.assertEqual(
            result.data.levels, ["Emerging", "Developing", "Proficient", "Advanced"]
        )

    def test_three_criteria_remainder_on_last(self) -> None:
        result = self.engine.parse_rubric("1. A\n2. B\n3. C")

        self.assertEqual(result.data.weights, [33, 33, 34])
        self.assertEqual(sum(result.data.weights), 100)

    def test_marked_rubric(self) -> None:
        text = (
            "- Research: depth of sources\n"
            "- Design: quality of prototype\n"
            "- Communication: clarity"
        )
        result = self.engine.parse_rubric(text)

        self.assertEqual(result.format, ExtractionFormat.MARKED_LIST)
        self.assertEqual([c.name for c in result.data.criteria], ["Research", "Design", "Communication"])
        self.assertEqual(result.data.weights, [33, 33, 34])

    def test_table_rubric(self) -> None:
        text = (
            "| Criteria | Emerging | Proficient |\n"
            "|---|---|---|\n"
            "| Research | Few sources | Many sources |\n"
            "| Design | Rough | Polished |"
        )
        result = self.engine.parse_rubric(text)

        self.assertEqual(result.format, ExtractionFormat.TABLE)
        self.assertEqual(result.confidence, 0.8)
        self.assertEqual([c.name for c in result.data.criteria], ["Research", "Design"])
        self.assertEqual(result.data.criteria[0].description, "Few sources Many sources")
        self.assertEqual(result.data.weights, [50, 50])

    def test_structured_rubric_ignores_given_weights(self) -> None:
        text = (
            '{"rubric": {"criteria": [{"name": "Inquiry", "weight": 50}, '
            '{"name": "Design", "weight": 30}, {"name": "Product", "weight": 20}], '
            '"levels": ["Low", "High"]}}'
        )
        result = self.engine.parse_rubric(text)

        self.assertEqual(result.format, ExtractionFormat.STRUCTURED)
        self.assertEqual(result.data.weights, [33, 33, 34])
        self.assertEqual(result.data.levels, ["Low", "High"])

    def test_structured_rubric_overweight_input(self) -> None:
        text = '{"criteria": [{"name": "Inquiry", "weight": 70}, {"name": "Product", "weight": 70}]}'
        result = self.engine.parse_rubric(text)

        self.assertEqual(result.data.weights, [50, 50])

    def test_minimal_rubric_defaults(self) -> None:
        result = self.engine.parse_rubric("")

        self.assertEqual(result.format, ExtractionFormat.MINIMAL_FALLBACK)
        self.assertEqual(
            [c.name for c in result.data.criteria],
            ["Content Understanding", "Creativity", "Collaboration", "Presentation"],
        )
        self.assertEqual(result.data.weights, [25, 25, 25, 25])
        self.assertIn("Using default rubric structure", result.warnings)


class ActivityExtractionTest(unittest.TestCase):

    def setUp(self) -> None:
        self.engine = ExtractionEngine()

    def test_bullets_with_milestone(self) -> None:
        text = (
            "- Research local rivers for 2 hours\n"
            "- Build a filter model\n"
            "- Milestone: prototype demo"
        )
        result = self.engine.parse_activities(text)

        self.assertEqual(result.format, ExtractionFormat.MARKED_LIST)
        self.assertEqual(len(result.data.activities), 2)
        self.assertEqual(result.data.milestones, ["prototype demo"])
        first, second = result.data.activities
        self.assertEqual(first.title, "Research local rivers for 2")
        self.assertEqual(first.type, ActivityCategory.EXPLORATION)
        self.assertEqual(first.duration, "2 hours")
        self.assertEqual(second.type, ActivityCategory.CREATION)
        self.assertEqual(second.duration, "1 hour")

    def test_structured_activities(self) -> None:
        text = (
            '{"activities": [{"name": "Survey", "description": "Walk the creek", '
            '"type": "exploration", "required": false}], "milestones": ["Data collected"]}'
        )
        result = self.engine.parse_activities(text)

        self.assertEqual(result.format, ExtractionFormat.STRUCTURED)
        activity = result.data.activities[0]
        self.assertEqual(activity.title, "Survey")
        self.assertEqual(activity.description, "Walk the creek")
        self.assertEqual(activity.duration, "1 hour")
        self.assertFalse(activity.required)
        self.assertEqual(result.data.milestones, ["Data collected"])
        self.assertEqual(result.item_count, 2)

    def test_sentence_fallback(self) -> None:
        text = (
            "Students should interview local farmers about irrigation. "
            "They will then compare water usage across seasons!"
        )
        result = self.engine.parse_activities(text)

        self.assertEqual(result.format, ExtractionFormat.PARAGRAPH_HEURISTIC)
        self.assertEqual(
            [a.title for a in result.data.activities], ["Activity 1", "Activity 2"]
        )
        self.assertEqual(result.data.activities[0].duration, "30 minutes")


class ResourceAndIdeationExtractionTest(unittest.TestCase):

    def setUp(self) -> None:
        self.engine = ExtractionEngine()

    def test_structured_resources(self) -> None:
        result = self.engine.parse_resources('{"resources": ["Lab kit", {"name": "Field guide"}]}')

        self.assertEqual(result.data, ["Lab kit", "Field guide"])
        self.assertEqual(result.format, ExtractionFormat.STRUCTURED)

    def test_numbered_resources(self) -> None:
        result = self.engine.parse_resources("1. Field guide\n2. Water test kit")

        self.assertEqual(result.format, ExtractionFormat.NUMBERED_LIST)
        self.assertEqual(result.data, ["Field guide", "Water test kit"])

    def test_delimited_resources(self) -> None:
        result = self.engine.parse_resources("microscopes, water test kits; field notebooks")

        self.assertEqual(result.format, ExtractionFormat.PARAGRAPH_HEURISTIC)
        self.assertEqual(result.data, ["microscopes", "water test kits", "field notebooks"])

    def test_marked_ideation(self) -> None:
        text = (
            "Driving Question: How can we reduce waste?\n"
            "Learning Objectives:\n"
            "- Measure waste\n"
            "- Compare solutions\n"
            "Success Criteria:\n"
            "- 20% reduction\n"
            "Real-World Application: Cafeteria policy"
        )
        result = self.engine.parse_ideation(text)

        self.assertEqual(result.format, ExtractionFormat.MARKED_LIST)
        data = result.data
        self.assertIsInstance(data, IdeationData)
        self.assertEqual(data.driving_question, "How can we reduce waste?")
        self.assertEqual(data.learning_objectives, ["Measure waste", "Compare solutions"])
        self.assertEqual(data.success_criteria, ["20% reduction"])
        self.assertEqual(data.real_world_application, "Cafeteria policy")

    def test_numbered_ideation_picks_question(self) -> None:
        text = "What makes water safe to drink?\n1. Identify contaminants\n2. Test samples"
        result = self.engine.parse_ideation(text)

        self.assertEqual(result.format, ExtractionFormat.NUMBERED_LIST)
        self.assertEqual(result.data.driving_question, "What makes water safe to drink?")
        self.assertEqual(result.data.learning_objectives, ["Identify contaminants", "Test samples"])

    def test_parse_text_helper(self) -> None:
        result = parse_text("resources", "- Rain gauge\n- Map")

        self.assertEqual(result.data, ["Rain gauge", "Map"])


class ExtractionResultTest(unittest.TestCase):

    def test_auto_apply_threshold(self) -> None:
        result = ExtractionResult(data=["x"], confidence=0.5, format=ExtractionFormat.PARAGRAPH_HEURISTIC)

        self.assertTrue(result.is_degraded)
        self.assertFalse(result.should_auto_apply())
        self.assertTrue(result.should_auto_apply(threshold=0.5))

    def test_empty_never_auto_applies(self) -> None:
        result = ExtractionResult(data=[], confidence=1.0, format=ExtractionFormat.STRUCTURED)

        self.assertTrue(result.is_empty)
        self.assertFalse(result.should_auto_apply(threshold=0.0))


if __name__ == "__main__":
    unittest.main()
