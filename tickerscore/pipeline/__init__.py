from .context import PipelineContext, Services
from .engine import AnalysisEngine
