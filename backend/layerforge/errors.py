"""Error taxonomy.

Request-level errors (``DesignNotFound``, ``LayerNotFound``,
``EncodeFailure``, ``ExportTimeout``) are rendered to the caller by the API
error handlers. Per-layer errors (``AssetUnavailable``, ``InvalidGeometry``
and their subclasses) are caught by the exporter, logged, and the layer is
left out of the composite.
"""

from __future__ import annotations

from typing import Any


class LayerforgeError(Exception):
    """Base class for every domain error."""

    code = "LAYERFORGE_ERROR"
    http_status = 500

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return {"error": error}


class DesignNotFound(LayerforgeError):
    code = "DESIGN_NOT_FOUND"
    http_status = 404

    def __init__(self, design_id: str) -> None:
        super().__init__(f"Design not found: {design_id}", design_id=design_id)
        self.design_id = design_id


class LayerNotFound(LayerforgeError):
    code = "LAYER_NOT_FOUND"
    http_status = 404

    def __init__(self, layer_id: str) -> None:
        super().__init__(f"Layer not found: {layer_id}", layer_id=layer_id)
        self.layer_id = layer_id


class InvalidDesign(LayerforgeError):
    """A stored design/layer change that would break a design invariant."""

    code = "INVALID_DESIGN"
    http_status = 400


class LayerRenderError(LayerforgeError):
    """A failure confined to one layer. The export carries on without it."""

    code = "LAYER_RENDER_ERROR"
    http_status = 422


class AssetUnavailable(LayerRenderError):
    code = "ASSET_UNAVAILABLE"


class DecodeError(AssetUnavailable):
    code = "DECODE_ERROR"


class InvalidGeometry(LayerRenderError):
    code = "INVALID_GEOMETRY"


class InvalidCrop(InvalidGeometry):
    code = "INVALID_CROP"


class ImmutableAssetRef(LayerforgeError):
    code = "IMMUTABLE_ASSET"
    http_status = 409


class EncodeFailure(LayerforgeError):
    code = "ENCODE_FAILURE"
    http_status = 500


class ExportTimeout(LayerforgeError):
    code = "EXPORT_TIMEOUT"
    http_status = 504
