"""Catalog index holding the sponsor snapshot and event scopes in memory."""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from core import Company, ScoringWeights, load_catalog, load_event_scopes
from sponsor_matcher import SponsorMatcher


class CatalogIndex:
    """Read-only view of the sponsor catalog served by the API."""

    def __init__(
        self,
        catalog_path: str | Path,
        events_path: Optional[str | Path] = None,
        weights: Optional[ScoringWeights] = None,
    ):
        """Initialize the catalog index.

        Args:
            catalog_path: Path to the catalog CSV or JSON
            events_path: Optional path to the event scopes JSON
            weights: Scoring weights (defaults if None)
        """
        self.catalog_path = Path(catalog_path)
        self.events_path = Path(events_path) if events_path else None
        self.weights = weights or ScoringWeights()
        self._matcher: Optional[SponsorMatcher] = None
        self._scopes: Dict[str, Optional[List[str]]] = {}
        self._loaded = False

    def load(self) -> None:
        """Load the catalog and event scopes from disk."""
        if not self.catalog_path.exists():
            raise FileNotFoundError(f"Catalog not found: {self.catalog_path}")

        companies = load_catalog(self.catalog_path)
        scopes: Dict[str, Optional[List[str]]] = {}
        if self.events_path is not None:
            if self.events_path.exists():
                scopes = load_event_scopes(self.events_path)
            else:
                logging.warning(f"Event scopes file not found: {self.events_path}")

        self._scopes = scopes
        self._matcher = SponsorMatcher(companies, self.weights)
        self._loaded = True

    def reload(self) -> None:
        """Reload the catalog from disk."""
        self.load()

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def matcher(self) -> SponsorMatcher:
        if self._matcher is None:
            raise RuntimeError("Catalog not loaded. Call load() first.")
        return self._matcher

    @property
    def companies(self) -> tuple[Company, ...]:
        return self.matcher.catalog

    @property
    def total_events(self) -> int:
        return len(self._scopes)

    def has_event(self, event_id: str) -> bool:
        return event_id in self._scopes

    def event_company_ids(self, event_id: str) -> Optional[List[str]]:
        """Get the company scope of an event (None means every company).

        Raises:
            KeyError: If the event is unknown
        """
        return self._scopes[event_id]


# Global singleton for the catalog index
_catalog_index: Optional[CatalogIndex] = None


def get_catalog_index() -> CatalogIndex:
    """Get the global catalog index singleton.

    Raises:
        RuntimeError: If index hasn't been initialized
    """
    if _catalog_index is None:
        raise RuntimeError("Catalog index not initialized. Call init_catalog_index first.")
    return _catalog_index


def init_catalog_index(
    catalog_path: str | Path,
    events_path: Optional[str | Path] = None,
    weights: Optional[ScoringWeights] = None,
) -> CatalogIndex:
    """Initialize the global catalog index.

    Returns:
        Initialized CatalogIndex
    """
    global _catalog_index
    _catalog_index = CatalogIndex(catalog_path, events_path, weights)
    _catalog_index.load()
    return _catalog_index
