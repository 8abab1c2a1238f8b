from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def branch_revenue_chart(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    data = pd.DataFrame(rows, columns=["name", "value"])
    hover = alt.selection_point(fields=["name"], on="mouseover", empty="all")
    bar = (
        alt.Chart(data)
        .mark_bar()
        .encode(
            x=alt.X("name:N", title="Branch", sort=None),
            y=alt.Y("value:Q", title="Revenue", axis=alt.Axis(format="~s", gridDash=[4, 4], domain=False, ticks=False)),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.4)),
            tooltip=[alt.Tooltip("name:N", title="Branch"), alt.Tooltip("value:Q", title="Revenue", format=",.0f")],
        )
        .add_params(hover)
        .properties(height=260)
    )
    return to_vega_spec(bar)


def monthly_revenue_chart(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    data = pd.DataFrame(rows, columns=["month", "revenue"])
    line = (
        alt.Chart(data)
        .mark_line(point={"filled": True, "size": 60})
        .encode(
            x=alt.X("month:N", title="Month", sort=None, axis=alt.Axis(grid=False)),
            y=alt.Y("revenue:Q", axis=alt.Axis(format="~s", gridDash=[4, 4], domain=False, ticks=False)),
            tooltip=["month", alt.Tooltip("revenue:Q", format=",.0f")],
        )
        .properties(height=260)
    )
    return to_vega_spec(line)
