"""Calculation services for working-set analytics.

Services:
- statistics.py - Dimension statistics (mean, median, population σ)
- box_plot.py - Quartiles, Tukey whiskers and IQR outliers
- outliers.py - Z-score (2σ) outlier detection
- bias.py - Working-set bias findings
- zones.py - Inspection zone aggregation
- envelope.py - Worst-case envelope with driving parts
- histogram.py - Histogram binning
- working_set.py - Working-set selection and summary
- background.py / dispatcher.py - Background execution and routing
"""

from app.services.background import AnalysisWorker
from app.services.dispatcher import CalculationError, ComputationDispatcher

__all__ = ["AnalysisWorker", "CalculationError", "ComputationDispatcher"]
