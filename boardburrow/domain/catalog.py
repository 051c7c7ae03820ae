"""
Catalog browsing: title search and genre filter.
"""

from typing import Iterable, List, Optional

from boardburrow.data.models import BoardGame, Genre


def search_catalog(
    games: Iterable[BoardGame],
    query: str = "",
    genre: Optional[Genre] = None,
) -> List[BoardGame]:
    """
    Filter the catalog.

    Args:
        games: Catalog to filter
        query: Case-insensitive title substring; empty matches every game
        genre: Only keep games of this genre, if given

    Returns:
        List[BoardGame]: Matching games in catalog order
    """
    needle = (query or "").strip().casefold()
    return [
        game for game in games
        if (not needle or needle in game.title.casefold())
        and (genre is None or game.genre == genre)
    ]
