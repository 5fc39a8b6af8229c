"""
Declarative plot export for well tables.
"""
from typing import Optional
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import polars as pl
from pydantic import BaseModel, field_validator

from wellforge.config.logging_utils import log_application_event
from wellforge.core.config import ensure_parent_directory
from wellforge.domain.exceptions import SchemaMismatchError


class PlotSpec(BaseModel):
    """Mapping of table columns to visual channels."""
    kind: str = "scatter"
    x: str
    y: str
    color: Optional[str] = None
    title: Optional[str] = None

    @field_validator("kind")
    @classmethod
    def validate_kind(cls, v):
        allowed_kinds = ["scatter", "line", "bar"]
        if v not in allowed_kinds:
            raise ValueError(f"Plot kind must be one of: {allowed_kinds}")
        return v

    def columns(self):
        return [column for column in (self.x, self.y, self.color) if column]


def render_plot(df: pl.DataFrame, spec: PlotSpec, output_path: str) -> str:
    """Render df according to spec into a PNG at output_path and return the path."""
    missing = [column for column in spec.columns() if column not in df.columns]
    if missing:
        raise SchemaMismatchError(f"Plot column(s) {missing} not found; available: {df.columns}")

    data = df.select(spec.columns()).drop_nulls(subset=[spec.x, spec.y])
    if spec.kind == "line":
        data = data.sort(spec.x)

    fig, ax = plt.subplots(figsize=(10, 6))
    try:
        x = data.get_column(spec.x).to_list()
        y = data.get_column(spec.y).to_list()
        if spec.kind == "scatter":
            if spec.color:
                colors = data.get_column(spec.color)
                if not colors.dtype.is_numeric():
                    # Categories become dense integer codes
                    colors = colors.cast(pl.Utf8).rank("dense").cast(pl.Int64)
                scatter = ax.scatter(x, y, c=colors.fill_null(-1).to_list(), cmap="viridis", alpha=0.8)
                fig.colorbar(scatter, ax=ax, label=spec.color)
            else:
                ax.scatter(x, y, alpha=0.8)
        elif spec.kind == "line":
            ax.plot(x, y, marker="o")
        else:
            ax.bar([str(value) for value in x], y)
            ax.tick_params(axis="x", rotation=45)

        ax.set_xlabel(spec.x)
        ax.set_ylabel(spec.y)
        ax.set_title(spec.title or f"{spec.y} vs {spec.x}")
        ax.grid(True, alpha=0.3)

        ensure_parent_directory(output_path)
        fig.savefig(output_path, dpi=150, bbox_inches="tight")
    finally:
        plt.close(fig)

    log_application_event("Plot exported", output_path)
    return output_path
