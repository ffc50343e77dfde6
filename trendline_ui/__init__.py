from trendline_ui.controls import NutrientTypeControl, RegionsControl
from trendline_ui.dashboard import TrendDashboard

__all__ = ["NutrientTypeControl", "RegionsControl", "TrendDashboard"]
