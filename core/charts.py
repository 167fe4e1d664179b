from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

DEFAULT_COLOR = "#7f8c8d"

PROGRAM_COLORS = {
    "Sistem Informasi": "#3498db",
    "Teknik Informatika": "#f39c12",
    "Komputerisasi Akuntansi": "#2ecc71",
    "Teknik Multimedia Dan Jaringan": "#9b59b6",
    "Teknik Multimedia dan Jaringan": "#9b59b6",
}

SCHOLARSHIP_COLORS = {
    "KIPK": "#f8d7da",
    "Non KIPK": "#d4edda",
}


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def pie_chart(counts: Mapping[str, int], title: str, colors: Optional[Mapping[str, str]] = None) -> Optional[alt.Chart]:
    data = pd.DataFrame({"label": list(counts.keys()), "count": [int(v) for v in counts.values()]})
    data = data[data["count"] > 0]
    if data.empty:
        return None
    colors = colors or {}
    domain = data["label"].tolist()
    palette = [colors.get(label, PROGRAM_COLORS.get(label, SCHOLARSHIP_COLORS.get(label, DEFAULT_COLOR))) for label in domain]
    return (
        alt.Chart(data, title=title)
        .mark_arc(outerRadius=120)
        .encode(
            theta=alt.Theta("count:Q", stack=True),
            color=alt.Color(
                "label:N",
                scale=alt.Scale(domain=domain, range=palette),
                legend=alt.Legend(orient="bottom", title=None),
            ),
            tooltip=[
                alt.Tooltip("label:N", title="Kategori"),
                alt.Tooltip("count:Q", title="Jumlah", format=","),
            ],
        )
        .properties(height=400)
    )


def bar_chart(counts: Mapping[str, int], title: str, *, x_title: str, y_title: str) -> Optional[alt.Chart]:
    data = pd.DataFrame({"label": list(counts.keys()), "count": [int(v) for v in counts.values()]})
    if data.empty:
        return None
    return (
        alt.Chart(data, title=title)
        .mark_bar(color="#3498db")
        .encode(
            x=alt.X("count:Q", title=x_title, axis=alt.Axis(format="d", gridDash=[4, 4])),
            y=alt.Y("label:N", title=y_title, sort="-x"),
            tooltip=[alt.Tooltip("label:N", title=y_title), alt.Tooltip("count:Q", title=x_title, format=",")],
        )
        .properties(height=max(160, 22 * len(data)))
    )
