from ..schema.highlighting import HighlightConfig


def inline_color_css(config: HighlightConfig) -> str:
    """CSS custom property carrying the highlight color, or "" when no color is set."""
    if not config.color:
        return ""
    return f":root{{--highlight-color: {config.color};}}"
