# run.py

import atexit
import os

from app import create_app, cleanup
from waitress import serve
from system.log_utils import info

app = create_app()
atexit.register(cleanup)

port = int(os.environ.get("BREATH_PORT", "5001"))
info(f"Serving via Waitress on http://0.0.0.0:{port}")
# Each SSE client holds a worker thread for the life of the stream
serve(app, host='0.0.0.0', port=port, threads=10)
