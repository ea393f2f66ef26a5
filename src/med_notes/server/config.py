"""Server configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

from med_notes.clients.config import FeatureServiceConfig
from med_notes.resolution.config import ResolutionConfig


@dataclass
class ServerConfig:
    """Configuration for the Med Notes resolution server."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8430

    # Collaborators
    feature_service: FeatureServiceConfig = field(default_factory=FeatureServiceConfig)

    # Debounce / cache
    resolution: ResolutionConfig = field(default_factory=ResolutionConfig)

    # Entity classes whose change webhooks invalidate the cache
    subscribe_to: list[str] = field(
        default_factory=lambda: ["features", "diseases", "disease_feature"]
    )

    # CORS
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
