"""Session and CLI Tests.

Tests for:
- JourneySession start/open/save and suggestion gating
- The typer CLI commands against a temporary data directory
"""

import json
import tempfile
import unittest
from pathlib import Path

from typer.testing import CliRunner

from journeyforge.app.cli import app
from journeyforge.app.config import JourneyForgeConfig, ParsingConfig, WorkflowConfig
from journeyforge.app.session import JourneySession
from journeyforge.core.enums import GradeBand
from journeyforge.core.exceptions import SnapshotNotFoundError
from journeyforge.core.models.extraction import ExtractionFormat
from journeyforge.core.models.journey import SeedContext
from journeyforge.systems.storage.snapshots import SnapshotStore
from journeyforge.utils.logging import setup_logging


STRUCTURED_PHASES = (
    '{"phases": [{"title": "Investigate", "focus": "Where the creek water comes from", '
    '"activities": ["Map the watershed"]}]}'
)

LOOSE_TEXT = (
    "Students explore the river ecosystem and record what they notice along the banks."
)


def make_config(root: Path, **workflow) -> JourneyForgeConfig:
    return JourneyForgeConfig(
        data_dir=root,
        snapshots_dir=root / "snapshots",
        parsing=ParsingConfig(),
        workflow=WorkflowConfig(**workflow),
    )


class JourneySessionTest(unittest.TestCase):

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.config = make_config(Path(self._tmp.name))

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_start_save_open(self) -> None:
        session = JourneySession.start(
            self.config, SeedContext(subject="Science", duration_weeks=8), project_id="creek"
        )
        self.assertTrue(session.session_id.startswith("SESS_"))
        self.assertTrue(session.dirty)

        session.workflow.add_objective(0, "Trace the water")
        session.save()
        self.assertFalse(session.dirty)

        reopened = JourneySession.open(self.config, "creek")
        self.assertEqual(reopened.state, session.state)
        self.assertFalse(reopened.dirty)
        self.assertEqual(reopened.project_id, "creek")

    def test_open_missing(self) -> None:
        with self.assertRaises(SnapshotNotFoundError):
            JourneySession.open(self.config, "never-saved")

    def test_confident_suggestions_applied(self) -> None:
        session = JourneySession.start(self.config, project_id="confident")
        result, applied = session.apply_phase_text(STRUCTURED_PHASES)

        self.assertTrue(applied)
        self.assertEqual(result.format, ExtractionFormat.STRUCTURED)
        phase = session.state.phases[0]
        self.assertEqual(phase.description, "Where the creek water comes from")
        self.assertEqual(phase.activities[0].name, "Map the watershed")
        self.assertEqual(session.revisions.count("confident"), 1)

    def test_degraded_suggestions_held(self) -> None:
        session = JourneySession.start(self.config, project_id="held")
        before = session.state
        result, applied = session.apply_phase_text(LOOSE_TEXT)

        self.assertFalse(applied)
        self.assertTrue(result.is_degraded)
        self.assertIs(session.state, before)

        result, applied = session.apply_phase_text(LOOSE_TEXT, force=True)
        self.assertTrue(applied)
        self.assertEqual(session.state.phases[0].description, LOOSE_TEXT)

    def test_activity_text(self) -> None:
        session = JourneySession.start(self.config, project_id="acts")
        result, applied = session.apply_activity_text(1, "- Sketch three ideas\n- Vote on a favourite")

        self.assertTrue(applied)
        self.assertEqual(len(session.state.phases[1].activities), 2)

    def test_review_views(self) -> None:
        session = JourneySession.start(self.config, project_id="review")
        session.workflow.navigate_to_phase(2)
        session.workflow.navigate_to_phase(1)
        session.workflow.confirm_iteration("Ideas did not hold up")

        self.assertEqual(session.iteration_log().summary()["total_iterations"], 1)
        self.assertEqual(session.completion().complete_phases, 0)
        self.assertEqual(session.parse("resources", "- Clipboard").data, ["Clipboard"])


class CliTest(unittest.TestCase):

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.config_path = make_config(self.root / "data").save(self.root / "config.json")
        self.runner = CliRunner()

    def tearDown(self) -> None:
        setup_logging(level="WARNING", console_output=True, file_output=False)
        self._tmp.cleanup()

    def invoke(self, *args: str):
        return self.runner.invoke(app, ["--config", str(self.config_path), *args])

    def write(self, name: str, text: str) -> Path:
        path = self.root / name
        path.write_text(text, encoding="utf-8")
        return path

    def test_parse_rubric(self) -> None:
        path = self.write("rubric.txt", "1. Research Skills: gather data\n2. Communication: present")
        result = self.invoke("parse", "rubric", str(path))

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Extraction Result", result.output)
        self.assertIn("numbered-list", result.output)
        self.assertIn("Research Skills", result.output)

    def test_parse_json_output(self) -> None:
        path = self.write("resources.txt", "- Rain gauge\n- Creek map")
        result = self.invoke("parse", "resources", str(path), "--json")

        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.stdout)
        self.assertEqual(payload["data"], ["Rain gauge", "Creek map"])
        self.assertEqual(payload["format"], "marked-list")
        self.assertEqual(payload["confidence"], 0.9)

    def test_parse_without_fallback(self) -> None:
        path = self.write("loose.txt", LOOSE_TEXT)
        result = self.invoke("parse", "phases", str(path), "--no-fallback", "--json")

        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.stdout)
        self.assertEqual(payload["format"], "none")
        self.assertEqual(payload["data"], [])

    def test_parse_missing_file(self) -> None:
        result = self.invoke("parse", "phases", str(self.root / "absent.txt"))

        self.assertEqual(result.exit_code, 1)
        self.assertIn("File not found", result.output)

    def test_parse_rejects_bad_min_confidence(self) -> None:
        path = self.write("resources.txt", "- Rain gauge")
        result = self.invoke("parse", "resources", str(path), "--min-confidence", "2")

        self.assertEqual(result.exit_code, 1)
        self.assertIn("min_confidence", result.output)

    def test_corrupt_snapshot(self) -> None:
        snapshots = self.root / "data" / "snapshots"
        snapshots.mkdir(parents=True)
        (snapshots / "broken.json").write_text("{not json", encoding="utf-8")
        (snapshots / "invalid.json").write_text('{"phases": []}', encoding="utf-8")
        path = self.write("phases.txt", STRUCTURED_PHASES)

        for project_id in ("broken", "invalid"):
            self.assertEqual(self.invoke("show", project_id).exit_code, 1)
            self.assertEqual(self.invoke("apply-phases", project_id, str(path)).exit_code, 1)

    def test_failures_logged_to_file(self) -> None:
        config = make_config(self.root / "data")
        config.log_to_file = True
        config.save(self.config_path)

        self.assertEqual(self.invoke("show", "ghost").exit_code, 1)
        log_file = self.root / "data" / "logs" / "journeyforge.log"
        self.assertIn("FAILED show: SnapshotNotFoundError", log_file.read_text(encoding="utf-8"))

    def test_init_and_show(self) -> None:
        result = self.invoke("init", "creek", "--subject", "Science", "--grade", "high school", "--weeks", "8")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Journey Created", result.output)

        state = SnapshotStore(self.root / "data" / "snapshots").load("creek")
        self.assertEqual(state.grade_level, GradeBand.HIGH)
        self.assertEqual(state.project_duration_weeks, 8)

        result = self.invoke("show", "creek")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Overall progress", result.output)
        self.assertIn("Iterations", result.output)

    def test_init_refuses_existing(self) -> None:
        self.assertEqual(self.invoke("init", "dup").exit_code, 0)

        result = self.invoke("init", "dup")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("already exists", result.output)
        self.assertEqual(self.invoke("init", "dup", "--force").exit_code, 0)

    def test_show_missing(self) -> None:
        result = self.invoke("show", "ghost")
        self.assertEqual(result.exit_code, 1)

    def test_apply_phases(self) -> None:
        self.invoke("init", "apply-me")
        path = self.write("phases.txt", STRUCTURED_PHASES)
        result = self.invoke("apply-phases", "apply-me", str(path))

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Applied 1 phase suggestion(s)", result.output)
        state = SnapshotStore(self.root / "data" / "snapshots").load("apply-me")
        self.assertEqual(state.phases[0].description, "Where the creek water comes from")

    def test_apply_phases_held_back(self) -> None:
        self.invoke("init", "held")
        path = self.write("loose.txt", LOOSE_TEXT)
        result = self.invoke("apply-phases", "held", str(path))

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Suggestions not applied", result.output)
        state = SnapshotStore(self.root / "data" / "snapshots").load("held")
        self.assertEqual(state.phases[0].activities, [])


if __name__ == "__main__":
    unittest.main()
