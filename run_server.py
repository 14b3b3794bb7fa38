import os

import uvicorn

if __name__ == "__main__":
    host = os.environ.get("TSE_HOST", "0.0.0.0")
    port = int(os.environ.get("TSE_PORT", "8000"))

    print("Starting Temporal Signature Engine API...")
    print(f"Docs available at: http://localhost:{port}/docs")

    uvicorn.run(
        "signature_engine.api.server:create_app",
        factory=True,
        host=host,
        port=port,
        reload=True
    )
