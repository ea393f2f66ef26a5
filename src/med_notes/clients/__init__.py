"""Adapters for the external collaborators."""

from med_notes.clients.change_feed import WebhookChangeFeed
from med_notes.clients.config import FeatureServiceConfig
from med_notes.clients.feature_service import FeatureServiceClient

__all__ = ["FeatureServiceClient", "FeatureServiceConfig", "WebhookChangeFeed"]
