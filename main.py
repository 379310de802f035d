import os
import uvicorn

from billmate.main import app  # noqa: F401  (re-exported for `uvicorn main:app`)


def run_http():
    """Run the HTTP server"""
    host = os.environ.get("BILLMATE_HOST", "127.0.0.1")
    port = int(os.environ.get("BILLMATE_PORT", "8000"))
    print(f"🚀 Starting BillMate on http://{host}:{port} ...")
    uvicorn.run(
        "billmate.main:app",  # Use string import
        host=host,
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    run_http()
