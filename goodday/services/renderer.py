"""
Chart renderer: ChartSpec → PNG bytes with matplotlib.

Uses the object-oriented Figure API with an Agg canvas (no pyplot global
state), so several charts can be rendered from worker threads at once.
"""
from __future__ import annotations

import io

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.patches import Patch, Rectangle

from goodday.core.errors import RenderError
from goodday.services.chart_spec import ChartSpec, Legend, Mark, Panel

DPI = 100
FONT_FAMILY = ["Helvetica Neue", "Helvetica", "Arial", "DejaVu Sans"]

_MARKERS = {"circle": "o", "triangle": "^", "square": "s"}


class MatplotlibRenderer:
    """Turns declarative chart specs into PNG images."""

    def __init__(self, dpi: int = DPI):
        self.dpi = dpi

    def render(self, spec: ChartSpec) -> bytes:
        try:
            figure = self._draw(spec)
            buffer = io.BytesIO()
            FigureCanvasAgg(figure)
            figure.savefig(buffer, format="png", facecolor=spec.background)
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(spec.filename, str(exc)) from exc
        return buffer.getvalue()

    # -- drawing -----------------------------------------------------------

    def _draw(self, spec: ChartSpec) -> Figure:
        if not spec.panels:
            raise RenderError(spec.filename, "chart has no panels")

        figure = Figure(
            figsize=(spec.width / self.dpi, spec.height / self.dpi),
            dpi=self.dpi,
            facecolor=spec.background,
            layout="constrained",
        )
        figure.suptitle(spec.title, fontsize=16, fontweight="bold", fontfamily=FONT_FAMILY)
        axes_list = figure.subplots(1, len(spec.panels), squeeze=False)[0]

        for ax, panel in zip(axes_list, spec.panels):
            self._draw_panel(ax, panel)

        for legend in spec.legends:
            self._draw_legend(figure, legend)
        return figure

    def _draw_panel(self, ax, panel: Panel) -> None:
        ax.set_xlim(*panel.x.limits)
        lo, hi = panel.y.limits
        if panel.y.kind == "band":
            # first band on top
            ax.set_ylim(hi, lo)
        else:
            ax.set_ylim(lo, hi)
        if panel.title:
            ax.set_title(panel.title, fontsize=13)

        for axis in panel.axes:
            values = [v for v, _ in axis.ticks]
            labels = [label for _, label in axis.ticks]
            target = ax.xaxis if axis.orient == "bottom" else ax.yaxis
            target.set_ticks(values)
            target.set_ticklabels(labels, fontsize=10)
            if axis.grid:
                target.grid(True, color="#e5e7eb")
            if axis.title:
                target.set_label_text(axis.title)

        for spine in ("top", "right"):
            ax.spines[spine].set_visible(False)

        for mark in panel.marks:
            self._draw_mark(ax, mark)

    def _draw_mark(self, ax, mark: Mark) -> None:
        style = mark.style
        if mark.kind == "band":
            for d in mark.data:
                ax.axvspan(
                    d["x_start"], d["x_end"],
                    color=d["color"], alpha=style.get("opacity", 0.2), linewidth=0, zorder=0,
                )
        elif mark.kind == "line":
            ax.plot(
                [d["x"] for d in mark.data],
                [d["y"] for d in mark.data],
                color=style.get("color"), linewidth=style.get("width", 2), zorder=2,
            )
        elif mark.kind == "symbol":
            if not mark.data:
                return
            ax.scatter(
                [d["x"] for d in mark.data],
                [d["y"] for d in mark.data],
                s=style.get("size", 100),
                c=style.get("color"),
                marker=_MARKERS.get(style.get("shape", "circle"), "o"),
                zorder=3,
            )
            for d in mark.data:
                if d.get("text"):
                    ax.annotate(
                        d["text"], (d["x"], d["y"]),
                        ha="center", va="center", fontsize=7, color="white", zorder=4,
                    )
        elif mark.kind == "cell":
            for d in mark.data:
                ax.add_patch(Rectangle(
                    (d["x"] - 0.5, d["y"] - 0.5), 1, 1,
                    facecolor=d["color"], edgecolor="white", linewidth=2,
                ))
        else:
            raise ValueError(f"unknown mark kind {mark.kind!r}")

    def _draw_legend(self, figure: Figure, legend: Legend) -> None:
        handles = []
        for entry in legend.entries:
            if entry.shape == "square":
                handles.append(Patch(facecolor=entry.color, label=entry.label))
            else:
                handles.append(Line2D(
                    [], [], linestyle="", marker=_MARKERS.get(entry.shape, "o"),
                    markersize=12, color=entry.color, label=entry.label,
                ))
        figure.legend(
            handles=handles,
            title=legend.title or None,
            loc="outside right upper",
            frameon=False,
        )
