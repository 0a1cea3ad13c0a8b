"""Desktop entry generation for Linux bundles."""

import os
import re

from appbundle.debug import log
from appbundle.fs import create_file_with_data

APPLICATIONS_DIR = os.path.join("usr", "share", "applications")


# Application categories mapped to freedesktop.org main and additional
# categories. Keys are compared lowercased with spaces, dashes and
# underscores removed, so "Developer Tool" and "developer-tool" both match.
DESKTOP_CATEGORIES = {
    "business": "Office;",
    "developertool": "Development;",
    "education": "Education;",
    "entertainment": "Game;",
    "finance": "Office;Finance;",
    "game": "Game;",
    "actiongame": "Game;ActionGame;",
    "adventuregame": "Game;AdventureGame;",
    "arcadegame": "Game;ArcadeGame;",
    "boardgame": "Game;BoardGame;",
    "cardgame": "Game;CardGame;",
    "puzzlegame": "Game;LogicGame;",
    "sportsgame": "Game;SportsGame;",
    "strategygame": "Game;StrategyGame;",
    "graphicsanddesign": "Graphics;",
    "healthcareandfitness": "Science;MedicalSoftware;",
    "medical": "Science;MedicalSoftware;",
    "music": "AudioVideo;Audio;Music;",
    "news": "Network;News;",
    "photography": "Graphics;Photography;",
    "productivity": "Office;",
    "reference": "Education;",
    "socialnetworking": "Network;",
    "sports": "Education;Sports;",
    "utility": "Utility;",
    "video": "AudioVideo;Video;",
}


def desktop_categories(category):
    """
    Categories= value for an application category name. Values that already
    contain ';' are taken as a literal desktop category list. Unknown names
    are logged and give None so the key is left out.
    """
    if not category:
        return None
    if ";" in category:
        return category
    key = re.sub(r"[\s_-]", "", category).lower()
    if key in DESKTOP_CATEGORIES:
        return DESKTOP_CATEGORIES[key]
    log(f"desktop: unknown application category {category!r}, leaving it out", "warn")
    return None


def desktop_entry(settings) -> str:
    """
    Render the .desktop entry for settings.

    See https://specifications.freedesktop.org/desktop-entry-spec/latest/
    for the format. The Version key is left out: it names the desktop
    entry format version, not the application version.
    """
    bin_name = settings.binary_name
    lines = ["[Desktop Entry]", "Encoding=UTF-8"]
    categories = desktop_categories(settings.app_category)
    if categories:
        lines.append(f"Categories={categories}")
    if settings.short_description:
        lines.append(f"Comment={settings.short_description}")
    if settings.linux_exec_args:
        lines.append(f"Exec={bin_name} {settings.linux_exec_args}")
    else:
        lines.append(f"Exec={bin_name}")
    lines.append(f"Icon={bin_name}")
    lines.append(f"Name={settings.bundle_name}")
    lines.append(f"Terminal={'true' if settings.linux_use_terminal else 'false'}")
    lines.append("Type=Application")
    lines.append("MimeType=" + "".join(f"{mime};" for mime in settings.linux_mime_types))
    return "\n".join(lines) + "\n"


def generate_desktop_file(settings, data_dir) -> str:
    """Write the desktop entry under data_dir and return its path."""
    path = os.path.join(os.fspath(data_dir), APPLICATIONS_DIR, f"{settings.binary_name}.desktop")
    create_file_with_data(path, desktop_entry(settings))
    log(f"Wrote desktop entry {path}", "debug")
    return path
