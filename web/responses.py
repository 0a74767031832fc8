from typing import Any

from fastapi.responses import JSONResponse
from pydantic import TypeAdapter

_any_adapter = TypeAdapter(Any)


def to_json(data: Any) -> Any:
    """Serialize DTOs and plain containers for JSON. Decimals become strings, so money keeps every digit."""
    return _any_adapter.dump_python(data, mode="json")


def success_response(data: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": True, "data": to_json(data)})
