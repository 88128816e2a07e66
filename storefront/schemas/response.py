"""Uniform response envelope shared by every endpoint"""

from fastapi.encoders import jsonable_encoder
from typing import Any, Dict, Optional, Sequence

class ApiResponse:
    """
    Builds ``{success, data?, count?, error?, message?}`` bodies
    
    Only the keys that were set are emitted. ``data`` goes through
    ``jsonable_encoder`` so schemas, UUIDs, datetimes and decimals
    serialize the same way everywhere.
    """
    
    @staticmethod
    def ok(
        data: Any = None,
        message: Optional[str] = None,
        count: Optional[int] = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": True}
        if data is not None:
            body["data"] = jsonable_encoder(data)
        if count is not None:
            body["count"] = count
        if message:
            body["message"] = message
        return body
    
    @staticmethod
    def listing(items: Sequence[Any], message: Optional[str] = None) -> Dict[str, Any]:
        return ApiResponse.ok(list(items), message=message, count=len(items))
    
    @staticmethod
    def deleted(message: str) -> Dict[str, Any]:
        return ApiResponse.ok({}, message=message)
    
    @staticmethod
    def failure(error: str) -> Dict[str, Any]:
        return {"success": False, "error": error}
