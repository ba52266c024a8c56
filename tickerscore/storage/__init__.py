from .results_store import ResultsStore
