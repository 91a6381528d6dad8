"""FastAPI dependency injection."""

from __future__ import annotations

from layerforge.config import Settings, settings
from layerforge.engine.config import PipelineConfig
from layerforge.engine.exporter import DesignExporter
from layerforge.engine.pipeline import create_pipeline
from layerforge.storage.assets import LocatorAssetSource
from layerforge.storage.designs import DesignStore, get_design_store

_exporter: DesignExporter | None = None


def get_settings() -> Settings:
    return settings


def get_store() -> DesignStore:
    return get_design_store()


def get_exporter() -> DesignExporter:
    """Get or create the shared DesignExporter (one render pool per process)."""
    global _exporter
    if _exporter is None:
        config = PipelineConfig(
            resize_filter=settings.resample_filter,
            max_workers=settings.render_workers,
        )
        source = LocatorAssetSource(
            settings.upload_dir,
            retries=settings.asset_fetch_retries,
            timeout=settings.asset_fetch_timeout_seconds,
        )
        _exporter = DesignExporter(source, pipeline=create_pipeline(config))
    return _exporter


def shutdown_exporter() -> None:
    global _exporter
    if _exporter is not None:
        _exporter.close()
        _exporter = None
