"""Analysis engine: runs every formula for an asset and assembles the report.

For one asset the engine:
1. Fans out the formulas as independent jobs (asyncio.gather over
   asyncio.to_thread) and joins the results by formula name
2. Builds the composite scores from the joined results
3. Classifies the trading signal
4. Contextualizes the base risk with treasury and liquidation data
5. Logs the breakdown at INFO level and returns a QuantitativeAnalysis

Formulas are pure and read only the frozen inputs, so jobs share no state
and completion order never affects the result. Jobs that consume another
formula's output run in a later stage of the same fan-out.

A batch applies the same pattern one level up: one task per asset, results
returned in input order.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING

import structlog

from quantsignal.config import AppSettings
from quantsignal.exceptions import AnalysisError
from quantsignal.indicators.mean_reversion import (
    calculate_bollinger_width,
    calculate_distance_from_ma,
    calculate_keltner_width,
    calculate_mean_reversion_score,
    calculate_percent_b,
    snapshot_keltner_width,
    typical_price,
)
from quantsignal.indicators.models import Direction, RSISignal, TradeBias, VWAPPosition
from quantsignal.indicators.moving_averages import calculate_sma
from quantsignal.indicators.momentum import (
    calculate_macd,
    calculate_macd_from_price,
    calculate_roc,
    calculate_rsi,
    calculate_rsi_series,
    calculate_stochastic,
    calculate_williams_r,
    detect_rsi_divergence,
    detect_series_divergence,
)
from quantsignal.indicators.oscillators import (
    calculate_awesome_oscillator,
    calculate_cci,
    calculate_dpo,
    calculate_rvi,
    calculate_ultimate_oscillator,
)
from quantsignal.indicators.risk import (
    calculate_beta,
    calculate_calmar_ratio,
    calculate_cvar,
    calculate_maximum_drawdown,
    calculate_sharpe_ratio,
    calculate_sortino_ratio,
    calculate_var,
)
from quantsignal.indicators.statistical import (
    calculate_indicator_agreement,
    calculate_linear_regression,
    calculate_noise_score,
    calculate_z_score,
)
from quantsignal.indicators.trend import (
    calculate_adx,
    calculate_parabolic_sar,
    calculate_supertrend,
)
from quantsignal.indicators.volatility import (
    calculate_atr,
    calculate_bollinger_bands,
    calculate_bollinger_bands_series,
    calculate_donchian_channels,
    calculate_garman_klass_volatility,
    calculate_historical_volatility,
    calculate_keltner_channels,
    calculate_parkinson_volatility,
    detect_bollinger_squeeze,
)
from quantsignal.indicators.volume import (
    calculate_ad_line,
    calculate_chaikin_money_flow,
    calculate_mfi,
    calculate_obv,
    calculate_volume_roc,
    calculate_vwap,
    classify_volume_roc,
)
from quantsignal.logging import get_logger
from quantsignal.risk.context import compute_risk_context
from quantsignal.risk.insights import generate_insights
from quantsignal.signals.classifier import classify_signal
from quantsignal.signals.composite import compute_composite_scores, compute_market_metrics
from quantsignal.signals.models import BatchOutcome, FormulaResults, QuantitativeAnalysis

if TYPE_CHECKING:
    from quantsignal.models import PricePoint, SeriesInput
    from quantsignal.risk.models import (
        AssetContext,
        DerivativesContext,
        LiquidationContext,
        TreasuryContext,
    )

logger = get_logger(__name__)

Job = Callable[[], object]


def _bias(direction: Direction) -> TradeBias:
    if direction is Direction.BULLISH:
        return TradeBias.BUY
    if direction is Direction.BEARISH:
        return TradeBias.SELL
    return TradeBias.NEUTRAL


def _rsi_bias(signal: RSISignal) -> TradeBias:
    if signal is RSISignal.OVERSOLD:
        return TradeBias.BUY
    if signal is RSISignal.OVERBOUGHT:
        return TradeBias.SELL
    return TradeBias.NEUTRAL


def _vwap_bias(position: VWAPPosition) -> TradeBias:
    if position is VWAPPosition.ABOVE:
        return TradeBias.BUY
    if position is VWAPPosition.BELOW:
        return TradeBias.SELL
    return TradeBias.NEUTRAL


async def _run_jobs(jobs: dict[str, Job]) -> dict[str, object]:
    """Run independent jobs concurrently and key each result by job name."""
    names = list(jobs)
    results = await asyncio.gather(*(asyncio.to_thread(jobs[name]) for name in names))
    return dict(zip(names, results))


class AnalysisEngine:
    """Produces a QuantitativeAnalysis per asset from formula fan-out.

    The engine holds only its settings; it is safe to share between tasks
    and to call concurrently.

    Args:
        settings: Application settings. Defaults (and environment overrides)
            apply when omitted.
    """

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    @property
    def settings(self) -> AppSettings:
        return self._settings

    async def analyze(
        self,
        price: PricePoint,
        series: SeriesInput | None = None,
        treasury: TreasuryContext | None = None,
        liquidation: LiquidationContext | None = None,
        derivatives: DerivativesContext | None = None,
    ) -> QuantitativeAnalysis:
        """Analyze one asset.

        Args:
            price: Current market snapshot.
            series: OHLCV history, oldest first. Without it the snapshot
                approximations are used and series-only formulas are skipped.
            treasury: Institutional holdings context, or None.
            liquidation: Liquidation clustering context, or None.
            derivatives: Derivatives positioning context, or None.

        Returns:
            The assembled QuantitativeAnalysis.
        """
        with structlog.contextvars.bound_contextvars(symbol=price.symbol):
            formulas = await self.compute_formulas(price, series)
            metrics = compute_market_metrics(price)

            composite = compute_composite_scores(formulas, metrics, self._settings.scoring)
            classification = classify_signal(
                momentum_score=composite.momentum.score,
                mean_reversion_score=composite.mean_reversion.score,
                squeeze=formulas.squeeze,
                divergence=formulas.divergence,
                overall_quality=composite.overall_quality,
                settings=self._settings.signal,
            )
            risk_context = compute_risk_context(
                composite.volatility.score,
                treasury=treasury,
                liquidation=liquidation,
                settings=self._settings.risk,
            )
            insights = generate_insights(
                classification.signal, risk_context, treasury, derivatives
            )

            analysis = QuantitativeAnalysis(
                symbol=price.symbol,
                name=price.name,
                timestamp=price.timestamp,
                price=price.price,
                formulas=formulas,
                composite=composite,
                classification=classification,
                risk_context=risk_context,
                metrics=metrics,
                insights=tuple(insights),
            )

            logger.info(
                "quant_analysis",
                symbol=price.symbol,
                mode="series" if series is not None else "snapshot",
                signal=classification.signal.value,
                confidence=classification.confidence,
                combined_score=classification.combined_score,
                momentum=composite.momentum.score,
                mean_reversion=composite.mean_reversion.score,
                base_risk=composite.volatility.score,
                risk=risk_context.final_risk,
                risk_level=risk_context.risk_level.value,
                quality=composite.overall_quality,
            )
            return analysis

    async def compute_formulas(
        self, price: PricePoint, series: SeriesInput | None = None
    ) -> FormulaResults:
        """Run every formula for one asset and join the outputs by name.

        Stage 1 holds the formulas that read only the inputs. Stage 2 holds
        those built on a stage 1 result (band position, squeeze, divergence,
        indicator agreement), stage 3 the mean-reversion blend and the noise
        score. Jobs within a stage are independent.
        """
        cfg = self._settings.indicators
        stage1: dict[str, Job]

        if series is None:
            stage1 = {
                "rsi": lambda: calculate_rsi(price.price, price.change_24h, price.ath, price.atl),
                "macd": lambda: calculate_macd_from_price(
                    price.price,
                    price.high_24h,
                    price.low_24h,
                    cfg.macd_fast,
                    cfg.macd_slow,
                    cfg.macd_signal,
                ),
                "bollinger_bands": lambda: calculate_bollinger_bands(
                    price.price, price.high_24h, price.low_24h, cfg.bollinger_std_dev
                ),
                "distance_from_ma": lambda: calculate_distance_from_ma(
                    price.price, typical_price(price.price, price.high_24h, price.low_24h)
                ),
                "keltner_width": lambda: calculate_keltner_width(
                    snapshot_keltner_width(
                        price.price, price.high_24h, price.low_24h, cfg.keltner_multiplier
                    )
                ),
                "adx": lambda: calculate_adx([], [], []),
                "volume_roc": lambda: classify_volume_roc(price.change_24h),
            }
        else:
            stage1 = self._series_jobs(price, series)

        logger.debug("formula_fanout", stage=1, jobs=len(stage1))
        results = await _run_jobs(stage1)

        bands = results["bollinger_bands"]
        rsi = results["rsi"]
        stage2: dict[str, Job] = {
            "percent_b": lambda: calculate_percent_b(price.price, bands),
            "bollinger_width": lambda: calculate_bollinger_width(bands),
            "squeeze": lambda: detect_bollinger_squeeze(bands),
        }
        if series is None:
            stage2["divergence"] = lambda: detect_rsi_divergence(
                price.price, rsi, price.ath, price.atl
            )
        else:
            stage2["keltner_width"] = lambda: calculate_keltner_width(
                results["keltner_channels"].width / 100
            )
            stage2["agreement"] = lambda: calculate_indicator_agreement(
                self._agreement_votes(results)
            )

        logger.debug("formula_fanout", stage=2, jobs=len(stage2))
        results.update(await _run_jobs(stage2))

        stage3: dict[str, Job] = {
            "mean_reversion": lambda: calculate_mean_reversion_score(
                results["percent_b"],
                results["bollinger_width"],
                results["distance_from_ma"],
                results["keltner_width"],
                percent_b_weight=self._settings.scoring.strength_percent_b,
                bollinger_width_weight=self._settings.scoring.strength_bollinger_width,
                distance_weight=self._settings.scoring.strength_distance,
                keltner_width_weight=self._settings.scoring.strength_keltner_width,
            ),
        }
        if series is not None:
            stage3["noise"] = lambda: calculate_noise_score(
                results["adx"].adx,
                results["atr"].normalized_atr,
                results["agreement"].agreement,
            )

        logger.debug("formula_fanout", stage=3, jobs=len(stage3))
        results.update(await _run_jobs(stage3))

        return FormulaResults(**results)

    def _series_jobs(self, price: PricePoint, series: SeriesInput) -> dict[str, Job]:
        """Stage 1 jobs when OHLCV history is available."""
        cfg = self._settings.indicators
        o, h, l, c, v = series.opens, series.highs, series.lows, series.closes, series.volumes
        returns = series.returns()

        def distance():
            # Too little history to average: the price is its own mean.
            if len(c) < cfg.bollinger_period:
                return calculate_distance_from_ma(price.price, price.price)
            return calculate_distance_from_ma(
                price.price, calculate_sma(c, cfg.bollinger_period).value
            )

        jobs: dict[str, Job] = {
            "rsi": lambda: calculate_rsi_series(c, cfg.rsi_period),
            "divergence": lambda: detect_series_divergence(
                c, cfg.rsi_period, cfg.divergence_lookback
            ),
            "macd": lambda: calculate_macd(c, cfg.macd_fast, cfg.macd_slow, cfg.macd_signal),
            "bollinger_bands": lambda: calculate_bollinger_bands_series(
                c, cfg.bollinger_period, cfg.bollinger_std_dev
            ),
            "distance_from_ma": distance,
            "adx": lambda: calculate_adx(h, l, c, cfg.adx_period),
            "volume_roc": lambda: calculate_volume_roc(v, cfg.volume_roc_period),
            "atr": lambda: calculate_atr(h, l, c, cfg.atr_period),
            "parabolic_sar": lambda: calculate_parabolic_sar(
                h, l, c, cfg.sar_af_start, cfg.sar_af_increment, cfg.sar_af_max
            ),
            "supertrend": lambda: calculate_supertrend(
                h, l, c, cfg.supertrend_period, cfg.supertrend_multiplier
            ),
            "keltner_channels": lambda: calculate_keltner_channels(
                h, l, c, cfg.keltner_period, cfg.keltner_multiplier
            ),
            "garman_klass": lambda: calculate_garman_klass_volatility(
                o, h, l, c, cfg.garman_klass_period, cfg.annualization_factor
            ),
            "vwap": lambda: calculate_vwap(h, l, c, v),
            "obv": lambda: calculate_obv(c, v),
            "regression": lambda: calculate_linear_regression(list(range(len(c))), c),
            "z_score": lambda: calculate_z_score(price.price, c),
            "var": lambda: calculate_var(returns),
            "cvar": lambda: calculate_cvar(returns),
            "max_drawdown": lambda: calculate_maximum_drawdown(c),
            "calmar": lambda: calculate_calmar_ratio(returns, cfg.annualization_factor),
            "sharpe": lambda: calculate_sharpe_ratio(
                returns, annualization_factor=cfg.annualization_factor
            ),
            "sortino": lambda: calculate_sortino_ratio(
                returns, annualization_factor=cfg.annualization_factor
            ),
            "stochastic": lambda: calculate_stochastic(
                h, l, c, cfg.stochastic_k_period, cfg.stochastic_d_period
            ),
            "williams_r": lambda: calculate_williams_r(h, l, c, cfg.williams_period),
            "roc": lambda: calculate_roc(c, cfg.roc_period),
            "cci": lambda: calculate_cci(h, l, c, cfg.cci_period),
            "awesome_oscillator": lambda: calculate_awesome_oscillator(
                h, l, cfg.awesome_fast, cfg.awesome_slow
            ),
            "dpo": lambda: calculate_dpo(c, cfg.dpo_period),
            "rvi": lambda: calculate_rvi(o, h, l, c, cfg.rvi_period),
            "ultimate_oscillator": lambda: calculate_ultimate_oscillator(
                h, l, c, cfg.ultimate_short, cfg.ultimate_medium, cfg.ultimate_long
            ),
            "donchian_channels": lambda: calculate_donchian_channels(
                h, l, c, cfg.donchian_period
            ),
            "parkinson": lambda: calculate_parkinson_volatility(
                h, l, cfg.range_volatility_period, cfg.annualization_factor
            ),
            "historical_volatility": lambda: calculate_historical_volatility(
                c, cfg.range_volatility_period, cfg.annualization_factor
            ),
            "ad_line": lambda: calculate_ad_line(h, l, c, v),
            "chaikin_money_flow": lambda: calculate_chaikin_money_flow(
                h, l, c, v, cfg.chaikin_period
            ),
            "mfi": lambda: calculate_mfi(h, l, c, v, cfg.mfi_period),
        }
        if series.benchmark_closes is not None:
            jobs["beta"] = lambda: calculate_beta(returns, series.benchmark_returns())
        return jobs

    @staticmethod
    def _agreement_votes(results: Mapping[str, object]) -> list[tuple[TradeBias, float]]:
        """One equally weighted vote per directional indicator."""
        return [
            (_rsi_bias(results["rsi"].signal), 1.0),
            (_bias(results["macd"].trend), 1.0),
            (_bias(results["adx"].trend_direction), 1.0),
            (_bias(results["supertrend"].trend), 1.0),
            (_bias(results["parabolic_sar"].trend), 1.0),
            (_vwap_bias(results["vwap"].position), 1.0),
        ]

    async def analyze_batch(
        self,
        prices: Sequence[PricePoint],
        series: Mapping[str, SeriesInput] | None = None,
        contexts: Mapping[str, AssetContext] | None = None,
    ) -> list[QuantitativeAnalysis]:
        """Analyze many assets concurrently, returning results in input order.

        By default the batch fails fast: the first asset that fails raises
        AnalysisError and the assets still in flight are cancelled. With
        ``analysis.isolate_failures`` enabled, failed assets are logged and
        left out while the rest are returned.

        Args:
            prices: Snapshots to analyze.
            series: OHLCV history keyed by symbol, for the assets that have it.
            contexts: External context keyed by symbol.

        Returns:
            One QuantitativeAnalysis per successfully analyzed asset, in the
            order of ``prices``.

        Raises:
            AnalysisError: On the first failed asset, unless failures are
                isolated.
        """
        if self._settings.analysis.isolate_failures:
            outcomes = await self.analyze_batch_settled(prices, series, contexts)
            return [o.analysis for o in outcomes if o.analysis is not None]

        semaphore = self._batch_semaphore()
        tasks = [
            asyncio.create_task(self._analyze_one(p, series, contexts, semaphore))
            for p in prices
        ]
        try:
            analyses = await asyncio.gather(*tasks)
        except BaseException:
            # Abort the unresolved assets and collect their outcomes.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        logger.info("batch_analysis_complete", assets=len(analyses))
        return list(analyses)

    async def analyze_batch_settled(
        self,
        prices: Sequence[PricePoint],
        series: Mapping[str, SeriesInput] | None = None,
        contexts: Mapping[str, AssetContext] | None = None,
    ) -> list[BatchOutcome]:
        """Analyze many assets, capturing each failure instead of raising.

        Returns:
            One BatchOutcome per input asset, in input order, holding either
            the analysis or the AnalysisError for that asset.
        """
        semaphore = self._batch_semaphore()
        tasks = [self._analyze_one(p, series, contexts, semaphore) for p in prices]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        outcomes: list[BatchOutcome] = []
        for price, result in zip(prices, results):
            if isinstance(result, AnalysisError):
                logger.warning(
                    "asset_analysis_failed",
                    symbol=price.symbol,
                    error=str(result.cause),
                )
                outcomes.append(BatchOutcome(symbol=price.symbol, error=result))
            elif isinstance(result, BaseException):
                raise result
            else:
                outcomes.append(BatchOutcome(symbol=price.symbol, analysis=result))

        logger.info(
            "batch_analysis_complete",
            assets=len(outcomes),
            failed=sum(1 for o in outcomes if not o.ok),
        )
        return outcomes

    async def _analyze_one(
        self,
        price: PricePoint,
        series: Mapping[str, SeriesInput] | None,
        contexts: Mapping[str, AssetContext] | None,
        semaphore: asyncio.Semaphore | None,
    ) -> QuantitativeAnalysis:
        context = contexts.get(price.symbol) if contexts else None
        limiter = semaphore if semaphore is not None else contextlib.nullcontext()

        async with limiter:
            try:
                return await self.analyze(
                    price,
                    series.get(price.symbol) if series else None,
                    treasury=context.treasury if context else None,
                    liquidation=context.liquidation if context else None,
                    derivatives=context.derivatives if context else None,
                )
            except Exception as e:
                raise AnalysisError(price.symbol, e) from e

    def _batch_semaphore(self) -> asyncio.Semaphore | None:
        limit = self._settings.analysis.batch_concurrency
        return asyncio.Semaphore(limit) if limit > 0 else None
