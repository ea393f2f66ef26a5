"""Configuration for the feature service client."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class FeatureServiceConfig:
    """Where the canonical feature registry lives.

    Defaults target a PostgREST-style backend running locally.
    """

    base_url: str = "http://localhost:54321"
    api_key: str = ""
    timeout: float = 5.0

    search_rpc: str = "search_features_advanced"
    canonicalize_rpc: str = "canonicalize_feature"
    stats_rpc: str = "get_disease_stats"
    attach_table: str = "disease_feature"
