"""
app/sinks package marker.
"""

from app.sinks.static_module_sink import render_weekly_data_module, write_weekly_data_module

__all__ = [
    "render_weekly_data_module",
    "write_weekly_data_module",
]
