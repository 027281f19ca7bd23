#!/usr/bin/env python3
"""
Run the fan CMS API with uvicorn.
"""

import argparse
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))


def main():
    parser = argparse.ArgumentParser(description="Run the fan CMS API server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument("--data-root", help="Directory holding data/ and cms-data/ (overrides DATA_ROOT)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    if args.data_root:
        os.environ["DATA_ROOT"] = args.data_root

    import uvicorn
    uvicorn.run("fancms.api.main:app", host=args.host, port=args.port, reload=args.reload, log_level="info")


if __name__ == "__main__":
    main()
