"""Status to visual style mapping."""

from __future__ import annotations

from dataclasses import dataclass

from .models import Status, StyleDescriptor


@dataclass(frozen=True, slots=True)
class _StatusPalette:
    rgb: tuple[int, int, int]
    legend_label: str


@dataclass(frozen=True, slots=True)
class _AlphaPolicy:
    fill: float
    hover_fill: float


_PALETTES = {
    Status.USING: _StatusPalette(rgb=(235, 73, 58), legend_label="Using SGARs"),
    Status.FREE: _StatusPalette(rgb=(76, 175, 80), legend_label="SGAR-Free"),
    Status.UNKNOWN: _StatusPalette(rgb=(158, 158, 158), legend_label="Status Unknown"),
}
_ALPHA_POLICY = _AlphaPolicy(fill=0.3, hover_fill=0.5)


def _rgba(rgb: tuple[int, int, int], alpha: float) -> str:
    return f"rgba({rgb[0]}, {rgb[1]}, {rgb[2]}, {alpha})"


def _hex(rgb: tuple[int, int, int]) -> str:
    return "#{:02X}{:02X}{:02X}".format(*rgb)


# No catalog entry for the boundary: faint fill, no outline.
UNMAPPED_STYLE = StyleDescriptor(fill_color="rgba(200, 200, 200, 0.1)", border_color=None)
# Catalog entry filtered out by the active criteria.
HIDDEN_STYLE = StyleDescriptor(fill_color="rgba(0, 0, 0, 0)", border_color=None, visible=False)


def style_for(status: Status | None, hover: bool = False) -> StyleDescriptor:
    """Style for a resolved entity. Hover raises fill opacity and keeps the hue."""
    palette = _PALETTES[status if status is not None else Status.UNKNOWN]
    alpha = _ALPHA_POLICY.hover_fill if hover else _ALPHA_POLICY.fill
    return StyleDescriptor(
        fill_color=_rgba(palette.rgb, alpha),
        border_color=_hex(palette.rgb),
    )


def legend_entries() -> list[tuple[Status, str, str]]:
    return [(status, palette.legend_label, _hex(palette.rgb)) for status, palette in _PALETTES.items()]
