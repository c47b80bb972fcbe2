# Result summaries (tables and narrative)
from .summary import build_zone_pressure_dataframe, build_pressure_summary, describe_result
