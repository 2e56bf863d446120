"""Font list shown in the text properties panel."""

import logging

logger = logging.getLogger("InfographicEditor.core.fonts")

DEFAULT_FONTS = [
    "Inter",
    "Arial",
    "Helvetica",
    "Times New Roman",
    "Georgia",
    "Monaco",
    "SF Pro",
    "Roboto",
]


async def fetch_system_fonts(host) -> list[str]:
    """Ask the host for installed font families, falling back to the built-in list."""
    try:
        fonts = await host.list_system_fonts()
    except Exception as e:
        logger.warning(f"Failed to load system fonts: {e}")
        return list(DEFAULT_FONTS)
    return list(fonts) if fonts else list(DEFAULT_FONTS)
