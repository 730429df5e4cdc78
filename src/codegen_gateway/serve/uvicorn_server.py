"""Launch the gateway FastAPI app under uvicorn."""
from __future__ import annotations
import os

import uvicorn

def main() -> None:
    host = os.getenv("GATEWAY_HOST", "0.0.0.0")
    port = int(os.getenv("GATEWAY_PORT", "5000"))
    log_level = os.getenv("LOG_LEVEL", "info").lower()

    uvicorn.run(
        "codegen_gateway.serve.fastapi_app:app",
        host=host,
        port=port,
        log_level=log_level,
    )

if __name__ == "__main__":
    main()
