from __future__ import annotations

from typing import Dict, List, Sequence

import pandas as pd

from core.domain.entities.candle_entity import CandleEntity


def _closes(candles: Sequence[CandleEntity]) -> pd.Series:
    return pd.Series(
        [float(c.close) for c in candles],
        index=[int(c.time) for c in candles],
        dtype="float64",
    )


def _points(series: pd.Series) -> List[Dict[str, float]]:
    return [{"time": int(t), "value": float(v)} for t, v in series.dropna().items()]


class IndicatorCalculationService:
    """
    Chart overlays computed from candle closes.

    Outputs are lists of {"time", "value"} points aligned to candle times,
    starting at the first candle where the full window is available.
    """

    @staticmethod
    def ema(candles: Sequence[CandleEntity], period: int) -> List[Dict[str, float]]:
        """
        Exponential moving average seeded with the SMA of the first `period` closes.
        """
        period = int(period)
        if period <= 0 or len(candles) < period:
            return []

        closes = _closes(candles)
        seeded = closes.iloc[period - 1 :].copy()
        seeded.iloc[0] = closes.iloc[:period].mean()
        return _points(seeded.ewm(span=period, adjust=False).mean())

    @staticmethod
    def bollinger_bands(
        candles: Sequence[CandleEntity],
        period: int,
        std_dev: float,
    ) -> Dict[str, List[Dict[str, float]]]:
        """
        SMA middle band with +/- std_dev population standard deviations.
        """
        period = int(period)
        if period <= 0 or len(candles) < period:
            return {"upper": [], "middle": [], "lower": []}

        closes = _closes(candles)
        sma = closes.rolling(window=period).mean()
        std = closes.rolling(window=period).std(ddof=0)

        return {
            "upper": _points(sma + std_dev * std),
            "middle": _points(sma),
            "lower": _points(sma - std_dev * std),
        }
