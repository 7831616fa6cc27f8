"""Volume formulas: VWAP, volume rate of change, on-balance volume, the
Accumulation/Distribution line, Chaikin Money Flow and the Money Flow Index.
"""

from collections.abc import Sequence

from quantsignal.indicators.models import (
    ADLineResult,
    ChaikinMFResult,
    FlowTrend,
    MFIResult,
    MoneyFlowSignal,
    OBVResult,
    OscillatorSignal,
    VolumeActivity,
    VolumeROCResult,
    VolumeSignal,
    VWAPPosition,
    VWAPResult,
)
from quantsignal.mathutils import align_tail, round_half_up, safe_divide

#: Band around VWAP (fraction) inside which price counts as AT.
_VWAP_TOLERANCE = 0.001

#: Points over which the OBV and A/D trends are read.
_FLOW_TREND_WINDOW = 10


def calculate_vwap(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    volumes: Sequence[float],
) -> VWAPResult:
    """Volume-weighted average of the typical price (H + L + C) / 3.

    The last close is ABOVE when more than 0.1% over VWAP, BELOW when more
    than 0.1% under, else AT. Empty input or zero total volume gives 0.
    """
    highs, lows, closes, volumes = align_tail(highs, lows, closes, volumes)
    weighted = sum((h + l + c) / 3 * v for h, l, c, v in zip(highs, lows, closes, volumes))
    vwap = safe_divide(weighted, sum(volumes))
    current = closes[-1] if closes else 0.0

    if current > vwap * (1 + _VWAP_TOLERANCE):
        position = VWAPPosition.ABOVE
    elif current < vwap * (1 - _VWAP_TOLERANCE):
        position = VWAPPosition.BELOW
    else:
        position = VWAPPosition.AT

    return VWAPResult(
        value=round_half_up(vwap, 2),
        position=position,
        deviation=round_half_up(safe_divide(current - vwap, vwap) * 100, 2),
    )


def classify_volume_roc(value: float) -> VolumeROCResult:
    """Classify a volume change (percent) by magnitude.

    Signal: >100 SURGE, >50 HIGH, >20 NORMAL, else LOW.
    Activity: >100 UNUSUAL, >50 ELEVATED, >10 NORMAL, else QUIET.
    """
    magnitude = abs(value)

    if magnitude > 100:
        signal = VolumeSignal.SURGE
    elif magnitude > 50:
        signal = VolumeSignal.HIGH
    elif magnitude > 20:
        signal = VolumeSignal.NORMAL
    else:
        signal = VolumeSignal.LOW

    if magnitude > 100:
        activity = VolumeActivity.UNUSUAL
    elif magnitude > 50:
        activity = VolumeActivity.ELEVATED
    elif magnitude > 10:
        activity = VolumeActivity.NORMAL
    else:
        activity = VolumeActivity.QUIET

    return VolumeROCResult(value=round_half_up(value, 2), signal=signal, activity=activity)


def calculate_volume_roc(volumes: Sequence[float], period: int = 14) -> VolumeROCResult:
    """Percent change of the last volume against ``period`` bars earlier.

    With fewer bars the first volume is the reference. A zero reference
    volume gives 0.
    """
    if not volumes:
        return classify_volume_roc(0.0)
    current = volumes[-1]
    past = volumes[-1 - period] if len(volumes) > period else volumes[0]
    return classify_volume_roc(safe_divide(current - past, past) * 100)


def _flow_trend(change: float) -> FlowTrend:
    if change > 0:
        return FlowTrend.ACCUMULATION
    if change < 0:
        return FlowTrend.DISTRIBUTION
    return FlowTrend.NEUTRAL


def calculate_obv(closes: Sequence[float], volumes: Sequence[float]) -> OBVResult:
    """On-balance volume: volume added on up closes, subtracted on down closes.

    Trend is the sign of the OBV change over the last 10 bars; momentum is the
    last bar's percent change of OBV.
    """
    closes, volumes = align_tail(closes, volumes)
    series: list[float] = []
    obv = 0.0
    for i, close in enumerate(closes):
        if i > 0:
            if close > closes[i - 1]:
                obv += volumes[i]
            elif close < closes[i - 1]:
                obv -= volumes[i]
        series.append(obv)

    if not series:
        return OBVResult(value=0.0, trend=FlowTrend.NEUTRAL, momentum=0.0)

    recent = series[-_FLOW_TREND_WINDOW:]
    trend = _flow_trend(recent[-1] - recent[0])

    momentum = 0.0
    if len(series) > 1:
        momentum = safe_divide(series[-1] - series[-2], abs(series[-2])) * 100

    return OBVResult(
        value=round_half_up(series[-1], 0),
        trend=trend,
        momentum=round_half_up(momentum, 2),
    )


def money_flow_multiplier(high: float, low: float, close: float) -> float:
    """Where the close sits in the bar's range, -1 (at low) to 1 (at high)."""
    return safe_divide((close - low) - (high - close), high - low)


def calculate_ad_line(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    volumes: Sequence[float],
) -> ADLineResult:
    """Accumulation/Distribution line: cumulative money flow volume.

    The line starts at 0; trend is the sign of its change over the last 10
    points and momentum the last point's percent change.
    """
    highs, lows, closes, volumes = align_tail(highs, lows, closes, volumes)
    series = [0.0]
    for h, l, c, v in zip(highs, lows, closes, volumes):
        series.append(series[-1] + money_flow_multiplier(h, l, c) * v)

    recent = series[-_FLOW_TREND_WINDOW:]
    momentum = 0.0
    if len(series) > 1:
        momentum = safe_divide(series[-1] - series[-2], abs(series[-2]) or 1.0) * 100

    return ADLineResult(
        value=round_half_up(series[-1], 0),
        trend=_flow_trend(recent[-1] - recent[0]),
        momentum=round_half_up(momentum, 2),
    )


def calculate_chaikin_money_flow(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    volumes: Sequence[float],
    period: int = 21,
) -> ChaikinMFResult:
    """Chaikin Money Flow: money flow volume over total volume, last ``period`` bars.

    Signal: >0.25 STRONG_BUYING, >0 BUYING, <-0.25 STRONG_SELLING, <0 SELLING.
    Pressure: >0.05 ACCUMULATION, <-0.05 DISTRIBUTION. Zero volume gives 0.
    """
    highs, lows, closes, volumes = align_tail(highs, lows, closes, volumes)
    window = list(zip(highs, lows, closes, volumes))[-period:]
    flow = sum(money_flow_multiplier(h, l, c) * v for h, l, c, v in window)
    cmf = safe_divide(flow, sum(v for *_, v in window))

    if cmf > 0.25:
        signal = MoneyFlowSignal.STRONG_BUYING
    elif cmf > 0:
        signal = MoneyFlowSignal.BUYING
    elif cmf < -0.25:
        signal = MoneyFlowSignal.STRONG_SELLING
    elif cmf < 0:
        signal = MoneyFlowSignal.SELLING
    else:
        signal = MoneyFlowSignal.NEUTRAL

    if cmf > 0.05:
        pressure = FlowTrend.ACCUMULATION
    elif cmf < -0.05:
        pressure = FlowTrend.DISTRIBUTION
    else:
        pressure = FlowTrend.NEUTRAL

    return ChaikinMFResult(value=round_half_up(cmf, 3), signal=signal, pressure=pressure)


def calculate_mfi(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    volumes: Sequence[float],
    period: int = 14,
) -> MFIResult:
    """Money Flow Index: a volume-weighted RSI of the typical price.

    Raw flow (typical price * volume) counts as positive when the typical
    price rose and negative when it fell, over the last ``period`` changes.
    MFI = 100 - 100 / (1 + positive / negative); with no negative flow the
    ratio is 100. Signal: >80 OVERBOUGHT, <20 OVERSOLD. Fewer than two bars,
    or no flow either way, read 50.
    """
    highs, lows, closes, volumes = align_tail(highs, lows, closes, volumes)
    typical = [(h + l + c) / 3 for h, l, c in zip(highs, lows, closes)]

    positive = 0.0
    negative = 0.0
    for i in range(max(1, len(typical) - period), len(typical)):
        if typical[i] > typical[i - 1]:
            positive += typical[i] * volumes[i]
        elif typical[i] < typical[i - 1]:
            negative += typical[i] * volumes[i]

    if positive == 0 and negative == 0:
        return MFIResult(value=50.0, signal=OscillatorSignal.NEUTRAL, money_flow_ratio=1.0)

    ratio = safe_divide(positive, negative, fallback=100.0)
    mfi = 100 - 100 / (1 + ratio)
    if mfi > 80:
        signal = OscillatorSignal.OVERBOUGHT
    elif mfi < 20:
        signal = OscillatorSignal.OVERSOLD
    else:
        signal = OscillatorSignal.NEUTRAL

    return MFIResult(
        value=round_half_up(mfi, 2),
        signal=signal,
        money_flow_ratio=round_half_up(ratio, 2),
    )
