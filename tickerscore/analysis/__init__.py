from .indicators import sma, ema, rsi, macd, last_defined, MACDResult
from .technical import TechnicalAnalyzer, IndicatorSnapshot, build_snapshot, score_snapshot
from .blending import ScoreWeights, ExternalScore, BlendOutcome, blend
from .result import AnalysisResult, AIAssessment
