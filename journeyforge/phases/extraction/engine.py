"""
Extraction Engine for JourneyForge.

Runs the strategy cascade for one payload kind over a block of generated
text and wraps the first usable outcome in an ExtractionResult.
"""

from __future__ import annotations

from typing import Any, Callable

from journeyforge.app.config import ParsingConfig
from journeyforge.core.models.extraction import (
    ActivitiesData,
    ExtractionFormat,
    ExtractionResult,
    IdeationData,
    ParsedPhase,
    RubricData,
    count_items,
)
from journeyforge.phases.extraction.normalize import clean_markdown
from journeyforge.phases.extraction.strategies import (
    ACTIVITY_STRATEGIES,
    IDEATION_STRATEGIES,
    PHASE_STRATEGIES,
    RESOURCE_STRATEGIES,
    RUBRIC_STRATEGIES,
    Matched,
    Missed,
    Strategy,
)
from journeyforge.utils.logging import get_logger

logger = get_logger("extraction.engine")


PARSE_KINDS = ("phases", "activities", "resources", "rubric", "ideation")

_EMPTY: dict[str, Callable[[], Any]] = {
    "phases": list,
    "activities": ActivitiesData,
    "resources": list,
    "rubric": RubricData,
    "ideation": IdeationData,
}


class ExtractionEngine:
    """Recovers structured records from free text.

    Usage:
        engine = ExtractionEngine(ParsingConfig(enable_fallback=True))
        result = engine.parse_phases(text)
        if result.should_auto_apply():
            ...

    The engine never raises on input. With fallback enabled every call
    yields at least one item; with fallback disabled an unmatched input
    yields an empty payload tagged ``none`` with confidence 0.0.

    Attributes:
        config: Cascade settings
        strategies: Ordered strategy tuple per payload kind
    """

    def __init__(
        self,
        config: ParsingConfig | None = None,
        strategies: dict[str, tuple[Strategy, ...]] | None = None,
    ):
        self.config = config or ParsingConfig()
        self.strategies: dict[str, tuple[Strategy, ...]] = {
            "phases": PHASE_STRATEGIES,
            "activities": ACTIVITY_STRATEGIES,
            "resources": RESOURCE_STRATEGIES,
            "rubric": RUBRIC_STRATEGIES,
            "ideation": IDEATION_STRATEGIES,
        }
        if strategies:
            unknown = set(strategies) - set(PARSE_KINDS)
            if unknown:
                raise ValueError(f"Unknown parse kinds: {sorted(unknown)}")
            self.strategies.update(strategies)

    # ========== Public operations ==========

    def parse_phases(self, text: str) -> ExtractionResult[list[ParsedPhase]]:
        return self._run("phases", text)

    def parse_activities(self, text: str) -> ExtractionResult[ActivitiesData]:
        return self._run("activities", text)

    def parse_resources(self, text: str) -> ExtractionResult[list[str]]:
        return self._run("resources", text)

    def parse_rubric(self, text: str) -> ExtractionResult[RubricData]:
        return self._run("rubric", text)

    def parse_ideation(self, text: str) -> ExtractionResult[IdeationData]:
        return self._run("ideation", text)

    def parse(self, kind: str, text: str) -> ExtractionResult:
        """Dispatch by payload kind name (see PARSE_KINDS)."""
        if kind not in PARSE_KINDS:
            raise ValueError(f"Unknown parse kind '{kind}', expected one of {PARSE_KINDS}")
        return self._run(kind, text)

    # ========== Cascade ==========

    def _eligible(self, strategy: Strategy) -> bool:
        if strategy.fallback:
            return self.config.enable_fallback
        return strategy.confidence >= self.config.min_confidence

    def _run(self, kind: str, text: str | None) -> ExtractionResult:
        raw = text or ""
        cleaned = raw if self.config.preserve_markdown else clean_markdown(raw)

        for strategy in self.strategies[kind]:
            if not self._eligible(strategy):
                logger.debug(f"{kind}: skipping {strategy.name}")
                continue

            try:
                outcome = strategy(raw if strategy.raw_text else cleaned)
            except Exception as e:
                logger.warning(f"{kind}: strategy {strategy.name} failed: {e}")
                continue

            if isinstance(outcome, Missed):
                logger.debug(f"{kind}: {strategy.name} missed ({outcome.reason})")
                continue
            if count_items(outcome.data) == 0:
                logger.debug(f"{kind}: {strategy.name} matched nothing")
                continue

            return self._build(kind, strategy, outcome)

        logger.info(f"{kind}: no strategy matched and fallback is disabled")
        return ExtractionResult(
            data=_EMPTY[kind](),
            confidence=0.0,
            format=ExtractionFormat.NONE,
            warnings=[f"No {kind} could be extracted and fallback is disabled"],
        )

    def _build(self, kind: str, strategy: Strategy, outcome: Matched) -> ExtractionResult:
        result = ExtractionResult(
            data=outcome.data,
            confidence=strategy.confidence,
            format=strategy.format,
            warnings=list(outcome.warnings),
        )
        if result.is_degraded:
            result.warnings.append(
                f"Low-confidence {kind} extraction ({strategy.format.value}); review before applying"
            )
            logger.info(
                f"{kind}: degraded extraction via {strategy.name} "
                f"(confidence {strategy.confidence}, {result.item_count} items)"
            )
        else:
            logger.debug(f"{kind}: {strategy.name} extracted {result.item_count} items")
        return result


def parse_text(kind: str, text: str, config: ParsingConfig | None = None) -> ExtractionResult:
    """Convenience wrapper: one-off engine, one parse."""
    return ExtractionEngine(config).parse(kind, text)
