"""UI theme definitions and selection helpers.

Themes are ANSI palettes for document roles (headings, links, quotes...) and
chrome (status line, help, file tree). Code-block colours come from the
separately configured Pygments style.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by the painter."""

    name: str
    reset: str
    heading1: str
    heading2: str
    heading: str
    bold: str
    italic: str
    code: str
    link: str
    link_selected: str
    image: str
    quote: str
    rule: str
    table_border: str
    marker: str
    search_hit: str
    search_current: str
    overflow: str
    status: str
    message: str
    prompt: str
    help_key: str
    help_dim: str
    tree_cursor: str
    tree_file: str

    def heading_sgr(self, level: int) -> str:
        if level == 1:
            return self.heading1
        if level == 2:
            return self.heading2
        return self.heading


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    heading1="\033[1;4;38;5;81m",
    heading2="\033[1;38;5;81m",
    heading="\033[1;38;5;117m",
    bold="\033[1m",
    italic="\033[3m",
    code="\033[38;5;180m",
    link="\033[4;38;5;75m",
    link_selected="\033[7;38;5;75m",
    image="\033[38;5;141m",
    quote="\033[38;5;244m",
    rule="\033[2;38;5;245m",
    table_border="\033[2;38;5;245m",
    marker="\033[38;5;44m",
    search_hit="\033[48;5;58m",
    search_current="\033[30;48;5;220m",
    overflow="\033[2;38;5;245m",
    status="\033[7m",
    message="\033[38;5;214m",
    prompt="\033[1;38;5;81m",
    help_key="\033[38;5;229m",
    help_dim="\033[2;38;5;250m",
    tree_cursor="\033[7m",
    tree_file="\033[38;5;252m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    heading1="\033[1;4;38;5;45m",
    heading2="\033[1;38;5;45m",
    heading="\033[1;38;5;117m",
    bold="\033[1m",
    italic="\033[3m",
    code="\033[38;5;153m",
    link="\033[4;38;5;39m",
    link_selected="\033[7;38;5;39m",
    image="\033[38;5;110m",
    quote="\033[38;5;73m",
    rule="\033[2;38;5;31m",
    table_border="\033[2;38;5;31m",
    marker="\033[38;5;39m",
    search_hit="\033[48;5;24m",
    search_current="\033[30;48;5;45m",
    overflow="\033[2;38;5;110m",
    status="\033[7;38;5;31m",
    message="\033[38;5;215m",
    prompt="\033[1;38;5;45m",
    help_key="\033[38;5;153m",
    help_dim="\033[2;38;5;110m",
    tree_cursor="\033[7;38;5;45m",
    tree_file="\033[38;5;252m",
)

MONO_THEME = UITheme(
    name="mono",
    reset="\033[0m",
    heading1="\033[1;4m",
    heading2="\033[1m",
    heading="\033[1m",
    bold="\033[1m",
    italic="\033[3m",
    code="",
    link="\033[4m",
    link_selected="\033[7m",
    image="\033[4m",
    quote="\033[2m",
    rule="\033[2m",
    table_border="\033[2m",
    marker="",
    search_hit="\033[4m",
    search_current="\033[7m",
    overflow="\033[2m",
    status="\033[7m",
    message="\033[1m",
    prompt="\033[1m",
    help_key="\033[1m",
    help_dim="\033[2m",
    tree_cursor="\033[7m",
    tree_file="",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    heading1="",
    heading2="",
    heading="",
    bold="",
    italic="",
    code="",
    link="",
    link_selected="",
    image="",
    quote="",
    rule="",
    table_border="",
    marker="",
    search_hit="",
    search_current="",
    overflow="",
    status="",
    message="",
    prompt="",
    help_key="",
    help_dim="",
    tree_cursor="",
    tree_file="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
    MONO_THEME.name: MONO_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "DEFAULT_THEME",
    "MONO_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "UITheme",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
