#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Requires the ``server`` extra (uvicorn). Reads configuration from the
environment / .env like the application itself.
"""
import os

import uvicorn

if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))
    print(f"Starting FieldOps API on http://localhost:{port} (docs at /docs)")
    uvicorn.run("fieldops.main:app", host="0.0.0.0", port=port, reload=True, log_level="info")
