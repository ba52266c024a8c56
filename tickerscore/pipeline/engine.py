"""AnalysisEngine: orchestrates step execution for one or many symbols."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional

from tickerscore.analysis.result import AnalysisResult
from tickerscore.config import ScoringConfig
from tickerscore.pipeline.context import PipelineContext, Services
from tickerscore.pipeline.steps import DEFAULT_STEPS
from tickerscore.utils.logger import setup_logger

logger = setup_logger("pipeline")

PipelineStep = Callable[[PipelineContext], None]


class AnalysisEngine:
    """Executes an ordered list of pipeline steps per symbol.

    A failing step is logged and recorded on the context; later steps still
    run.  Results are persisted when a store is attached.
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        services: Services | None = None,
        store=None,
        steps: list[PipelineStep] | None = None,
    ):
        self.config = config or ScoringConfig.from_settings()
        self.services = services or Services.from_config(self.config)
        self.store = store
        self.steps = list(steps or DEFAULT_STEPS)

    def execute(self, symbol: str) -> PipelineContext:
        """Run every step for *symbol* and return the populated context."""
        ctx = PipelineContext(symbol=symbol, config=self.config, services=self.services)
        logger.info(
            "Pipeline started: symbol=%s ai=%s ai_tech=%s steps=%d",
            symbol, ctx.ai_enabled, ctx.ai_tech_enabled, len(self.steps),
        )

        for i, step in enumerate(self.steps, 1):
            step_name = getattr(step, "__name__", step.__class__.__name__)
            logger.debug("[%d/%d] Running: %s", i, len(self.steps), step_name)
            try:
                step(ctx)
                ctx.steps_completed.append(step_name)
            except Exception as e:
                logger.error("Step %s failed for %s: %s", step_name, symbol, e)
                ctx.errors.append({"step": step_name, "error": str(e)})

        if ctx.result is not None and self.store is not None:
            try:
                self.store.add_analysis(ctx.result.symbol, ctx.result)
            except Exception as e:
                logger.error("Saving analysis for %s failed: %s", ctx.result.symbol, e)
                ctx.errors.append({"step": "save_analysis", "error": str(e)})
        return ctx

    def run(self, symbol: str) -> Optional[AnalysisResult]:
        """Analyze one symbol; None only when no price data was available."""
        return self.execute(symbol).result

    def run_many(
        self, symbols: list[str], max_workers: int = 4,
    ) -> dict[str, Optional[AnalysisResult]]:
        """Analyze *symbols* concurrently; each run is independent."""
        results: dict[str, Optional[AnalysisResult]] = {}
        if not symbols:
            return results

        t0 = time.monotonic()
        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
            future_to_symbol = {executor.submit(self.run, s): s for s in symbols}
            for future in as_completed(future_to_symbol):
                symbol = future_to_symbol[future]
                try:
                    results[symbol] = future.result()
                except Exception as e:
                    logger.error("Analysis failed for %s: %s", symbol, e)
                    results[symbol] = None

        processed = sum(1 for r in results.values() if r is not None)
        logger.info(
            "Processed %d/%d symbols in %.1fs", processed, len(symbols), time.monotonic() - t0,
        )
        return {s: results.get(s) for s in symbols}
